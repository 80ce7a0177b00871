"""Single-application deploy.

Stage order (strict)::

    1. VALIDATING_INPUTS     target environment, application directory
    2. RESOLVING_DESCRIPTOR  package.json name → <opsDir>/<app>/deploy.yaml
    3. SELECTING_VERSION     --image-tag override, else latestReleaseVersion
    4. PREPARING_ARTIFACT    values.<env>.yaml template, chart directory
    5. SUBSTITUTING          private values copy, descriptor variables + IMAGE_TAG
    6. INVOKING              helm upgrade --install --create-namespace --wait

Any failing stage aborts the whole deploy; nothing reaches the installer
unless every variable was bound.
"""

from __future__ import annotations

import logging
import os
from collections import ChainMap
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from deployer import ui
from deployer.config.descriptors import (
    check_path_exists,
    check_target_environment,
    load_application,
)
from deployer.config.manifest import read_manifest
from deployer.config.models import (
    IMAGE_TAG_VARIABLE,
    DeployOptions,
    ReleaseDescriptor,
    values_file_name,
)
from deployer.errors import DeployerError
from deployer.process.runner import EchoFn
from deployer.workflow.pipeline import (
    EXIT_SUCCESS,
    invoke_installer,
    rendered_values,
    report_failure,
)

logger = logging.getLogger(__name__)


class DeployStage(str, Enum):
    """Stages of :func:`deploy_application`, in execution order."""

    VALIDATING_INPUTS = "validating inputs"
    RESOLVING_DESCRIPTOR = "resolving descriptor"
    SELECTING_VERSION = "selecting version"
    PREPARING_ARTIFACT = "preparing artifact"
    SUBSTITUTING = "substituting variables"
    INVOKING = "invoking installer"


@dataclass
class DeployResult:
    """Outcome of a successful :func:`deploy_application`."""

    app_name: str
    namespace: str
    release_version: str
    chart_dir: str
    output: bytes = b""


def select_release_version(
    descriptor: ReleaseDescriptor,
    image_tag: Optional[str] = None,
) -> str:
    """Return *image_tag* when given, else the descriptor's latest version."""
    if image_tag:
        return image_tag
    return descriptor.latest_release_version


def deploy_application(
    options: DeployOptions,
    *,
    env: Optional[Mapping[str, str]] = None,
    echo: Optional[EchoFn] = None,
    artifact_dir: Optional[Path] = None,
) -> DeployResult:
    """Deploy one application; raise :class:`DeployerError` on any failure.

    *env* is the variable source (defaults to ``os.environ``).  ``IMAGE_TAG``
    is layered on top of it and never written back to the process.
    """
    source: Mapping[str, str] = os.environ if env is None else env
    stage = DeployStage.VALIDATING_INPUTS
    try:
        check_target_environment(options.environment)
        logger.info("Checking if the application directory exists: %s", options.app_dir)
        app_dir = check_path_exists(options.app_dir, "Directory")

        stage = DeployStage.RESOLVING_DESCRIPTOR
        app_name = read_manifest(app_dir, ("name",)).name
        logger.info("Read package.json: name=%s", app_name)
        app_ops_dir = Path(options.ops_dir) / app_name
        descriptor = load_application(app_ops_dir)

        stage = DeployStage.SELECTING_VERSION
        release_version = select_release_version(descriptor, options.image_tag)
        ui.detail("release version", release_version)

        stage = DeployStage.PREPARING_ARTIFACT
        template = check_path_exists(
            app_ops_dir / values_file_name(options.environment),
            "Values for the chart",
        )
        chart_dir = check_path_exists(
            Path(options.infrastructure_dir) / "charts" / descriptor.chart,
            "Chart",
        )
        namespace = options.namespace or app_name

        stage = DeployStage.SUBSTITUTING
        with rendered_values(
            template,
            release_name=app_name,
            variables=descriptor.bound_variables(),
            environment=options.environment,
            env=ChainMap({IMAGE_TAG_VARIABLE: release_version}, source),
            artifact_dir=artifact_dir,
        ) as values_file:
            stage = DeployStage.INVOKING
            output = invoke_installer(
                app_name, str(chart_dir), values_file, namespace, echo=echo,
            )
    except DeployerError:
        logger.error("Deploy failed while %s", stage.value)
        raise

    logger.info("Application %s deployed", app_name)
    return DeployResult(
        app_name=app_name,
        namespace=namespace,
        release_version=release_version,
        chart_dir=str(chart_dir),
        output=output,
    )


def run_deploy_workflow(options: DeployOptions) -> int:
    """CLI entry: deploy and return one of the ``EXIT_*`` constants."""
    ui.phase("DEPLOY")
    try:
        result = deploy_application(options)
    except DeployerError as exc:
        return report_failure("Error running deploy process", exc)

    ui.success_panel(
        "Deployed",
        f"{result.app_name} {result.release_version} → namespace {result.namespace}",
    )
    return EXIT_SUCCESS
