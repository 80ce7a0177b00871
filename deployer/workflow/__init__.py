"""Orchestration workflows (deploy, vendors, release, functional test)."""

from deployer.workflow.deploy import (
    DeployResult,
    DeployStage,
    deploy_application,
    run_deploy_workflow,
    select_release_version,
)
from deployer.workflow.functional import run_functional_test, run_functional_workflow
from deployer.workflow.pipeline import (
    EXIT_COMMAND_FAILURE,
    EXIT_SUCCESS,
    EXIT_UNIT_FAILURE,
    EXIT_VALIDATION_FAILURE,
    exit_code_for,
    install_release,
    invoke_installer,
    rendered_values,
)
from deployer.workflow.release import release_application, run_release_workflow
from deployer.workflow.vendors import (
    UnitResult,
    VendorsReport,
    deploy_vendors,
    run_vendors_workflow,
)

__all__ = [
    "DeployResult",
    "DeployStage",
    "EXIT_COMMAND_FAILURE",
    "EXIT_SUCCESS",
    "EXIT_UNIT_FAILURE",
    "EXIT_VALIDATION_FAILURE",
    "UnitResult",
    "VendorsReport",
    "deploy_application",
    "deploy_vendors",
    "exit_code_for",
    "install_release",
    "invoke_installer",
    "release_application",
    "rendered_values",
    "run_deploy_workflow",
    "run_functional_test",
    "run_functional_workflow",
    "run_release_workflow",
    "run_vendors_workflow",
    "select_release_version",
]
