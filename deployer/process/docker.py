"""Container image build, vulnerability scan, and push.

Thin wrappers around ``docker`` and ``trivy``; each step streams its
output through :func:`~deployer.process.runner.execute_command`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from deployer.errors import CommandError
from deployer.process.runner import execute_command

logger = logging.getLogger(__name__)

#: Severities that fail the scan.
SCAN_SEVERITY: str = "HIGH,CRITICAL"


def image_name(username: str, app_name: str, version: str) -> str:
    """Return ``<username>/<app>:<version>``."""
    return f"{username}/{app_name}:{version}"


def _run(args: List[str], failure: str) -> None:
    try:
        execute_command(args)
    except CommandError as exc:
        raise CommandError(
            f"{failure}: {exc}",
            command=exc.command,
            returncode=exc.returncode,
            output=exc.output,
        ) from exc


def build_image(app_dir: str | Path, image: str) -> None:
    """``docker build`` *app_dir* using its ``Dockerfile``."""
    app_dir = Path(app_dir)
    _run(
        ["docker", "build", "-t", image, "-f", str(app_dir / "Dockerfile"), str(app_dir)],
        f"failed to build Docker image {image}",
    )
    logger.info("Built Docker image: %s", image)


def scan_image(image: str) -> None:
    """Fail when ``trivy`` reports HIGH or CRITICAL vulnerabilities."""
    _run(
        ["trivy", "image", "--severity", SCAN_SEVERITY, "--exit-code", "1", image],
        f"Trivy found security vulnerabilities in {image}",
    )
    logger.info("Ran Trivy for security checks on Docker image: %s", image)


def push_image(image: str) -> None:
    """``docker push`` *image*."""
    _run(["docker", "push", image], f"failed to push Docker image {image}")
    logger.info("Pushed Docker image to the private repository: %s", image)
