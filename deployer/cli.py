"""CLI entry point for deployer, built on Typer.

Provides ``deploy``, ``release``, ``vendors deploy``, ``test functional``
and ``version`` commands.

Usage::

    deployer --help
    deployer deploy -d ./apps/web -o ./ops -i ./infra -e development
    deployer release -d ./apps/web -o ./ops -u myorg
    deployer vendors deploy -i ./infra -e production
    deployer test functional -d ./apps/web -u web.example.com -e health
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import typer

from deployer import __version__, ui

# ── App specification ────────────────────────────────────────────────────────

app = typer.Typer(
    name="deployer",
    help="DevOps management made easy: release, deploy, and test applications.",
    no_args_is_help=True,
    add_completion=False,
)
vendors_app = typer.Typer(help="Manage shared infrastructure vendors.", no_args_is_help=True)
test_app = typer.Typer(help="Test the application.", no_args_is_help=True)
app.add_typer(vendors_app, name="vendors")
app.add_typer(test_app, name="test")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ── Root callback (global options) ───────────────────────────────────────────


@app.callback()
def _root_callback(
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug logging."
    ),
) -> None:
    """Deployer control plane."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=_LOG_FORMAT,
    )


# ── deploy command ───────────────────────────────────────────────────────────


@app.command()
def deploy(
    app_dir: str = typer.Option(
        ...,
        "--application-directory",
        "--application_directory",
        "-d",
        help="The path of the application directory.",
    ),
    ops_dir: str = typer.Option(
        ...,
        "--operations-directory",
        "--operations_directory",
        "-o",
        help="The path of the operations directory.",
    ),
    infrastructure_dir: str = typer.Option(
        ...,
        "--infrastructure-directory",
        "--infrastructure_directory",
        "-i",
        help="The path of the infrastructure directory.",
    ),
    environment: str = typer.Option(
        ...,
        "--target-environment",
        "--target_environment",
        "-e",
        help="The environment to deploy to (development, homolog, production).",
    ),
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace",
        "-n",
        help="The namespace to deploy to. Defaults to the application name.",
    ),
    image_tag: Optional[str] = typer.Option(
        None,
        "--image-tag",
        "--image_tag",
        "-t",
        help="The image tag to use. Defaults to latestReleaseVersion.",
    ),
) -> None:
    """Deploy the application."""
    from deployer.config.models import DeployOptions
    from deployer.workflow.deploy import run_deploy_workflow

    rc = run_deploy_workflow(
        DeployOptions(
            app_dir=app_dir,
            ops_dir=ops_dir,
            infrastructure_dir=infrastructure_dir,
            environment=environment,
            namespace=namespace,
            image_tag=image_tag,
        )
    )
    raise typer.Exit(rc)


# ── release command ──────────────────────────────────────────────────────────


@app.command()
def release(
    app_dir: str = typer.Option(
        ...,
        "--application-directory",
        "--application_directory",
        "-d",
        help="The path of the application directory.",
    ),
    ops_dir: str = typer.Option(
        ...,
        "--operations-directory",
        "--operations_directory",
        "-o",
        help="The path of the operations directory.",
    ),
    username: str = typer.Option(
        ...,
        "--username",
        "-u",
        envvar="DOCKER_USERNAME",
        help="The username to access the private repository.",
    ),
) -> None:
    """Release the application.

    Environment variables:
      DOCKER_USERNAME   Default for --username.
      DOCKER_PASSWORD   Registry password/token; prompted for when unset.
    """
    from deployer.config.models import ReleaseOptions
    from deployer.workflow.release import run_release_workflow

    token = os.environ.get("DOCKER_PASSWORD", "")
    if token:
        ui.info("Using Docker token from environment variable DOCKER_PASSWORD")
    else:
        token = typer.prompt("Insert the docker password/token", hide_input=True)

    rc = run_release_workflow(
        ReleaseOptions(
            app_dir=app_dir,
            ops_dir=ops_dir,
            username=username,
            token=token,
        )
    )
    raise typer.Exit(rc)


# ── vendors deploy command ───────────────────────────────────────────────────


@vendors_app.command("deploy")
def vendors_deploy(
    infrastructure_dir: str = typer.Option(
        ...,
        "--infrastructure-directory",
        "--infrastructure_directory",
        "-i",
        help="The path of the infrastructure directory.",
    ),
    environment: str = typer.Option(
        ...,
        "--target-environment",
        "--target_environment",
        "-e",
        help="The environment to deploy to.",
    ),
) -> None:
    """Deploy every vendor script and chart listed in infra.yaml."""
    from deployer.config.models import VendorsOptions
    from deployer.workflow.vendors import run_vendors_workflow

    rc = run_vendors_workflow(
        VendorsOptions(infrastructure_dir=infrastructure_dir, environment=environment)
    )
    raise typer.Exit(rc)


# ── test functional command ──────────────────────────────────────────────────


@test_app.command("functional")
def functional(
    app_dir: str = typer.Option(
        ...,
        "--application-directory",
        "--application_directory",
        "-d",
        help="The path of the application directory.",
    ),
    host: str = typer.Option(
        ..., "--host", "-u", help="The host of the application."
    ),
    endpoint: str = typer.Option(
        ..., "--endpoint", "-e", help="The endpoint of the application."
    ),
) -> None:
    """Run the functional test."""
    from deployer.config.models import FunctionalTestOptions
    from deployer.workflow.functional import run_functional_workflow

    rc = run_functional_workflow(
        FunctionalTestOptions(app_dir=app_dir, host=host, endpoint=endpoint)
    )
    raise typer.Exit(rc)


# ── version command ──────────────────────────────────────────────────────────


@app.command()
def version() -> None:
    """Show Deployer version."""
    typer.echo(f"Deployer version: {__version__}")


# ── Entry point ──────────────────────────────────────────────────────────────


def main() -> int:
    """Run the CLI and return an exit code."""
    try:
        app()
        return 0
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())
