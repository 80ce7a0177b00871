"""Release workflow: publish an image and record the released version.

Steps (strict order, first failure aborts)::

    1. Validate application directory and registry credentials
    2. Read name/version from package.json
    3. Refuse if <username>/<name>:<version> already exists on Docker Hub
    4. docker build → trivy scan → docker push
    5. Write latestReleaseVersion=<version> into <opsDir>/<name>/deploy.yaml
    6. Bump the patch version in package.json
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from deployer import registry, ui
from deployer.config.descriptors import check_path_exists, write_release_version
from deployer.config.manifest import bump_patch_version, read_manifest
from deployer.config.models import ReleaseOptions
from deployer.errors import ConfigurationError, DeployerError
from deployer.process import docker
from deployer.workflow.pipeline import EXIT_SUCCESS, report_failure

logger = logging.getLogger(__name__)


@dataclass
class ReleaseResult:
    """Outcome of a successful :func:`release_application`."""

    app_name: str
    released_version: str
    next_version: str
    image: str


def release_application(options: ReleaseOptions) -> ReleaseResult:
    """Build, scan, and push the application image, then record it."""
    logger.info("Starting release process for application in directory: %s", options.app_dir)
    app_dir = check_path_exists(options.app_dir, "Directory")

    missing = [
        label
        for label, value in (("username", options.username), ("token", options.token))
        if not value
    ]
    if missing:
        raise ConfigurationError("Missing required fields", missing)

    manifest = read_manifest(app_dir, ("name", "version"))
    app_name, version = manifest.name, manifest.version
    logger.info("Read package.json: name=%s, version=%s", app_name, version)

    app_ops_dir = Path(options.ops_dir) / app_name
    check_path_exists(app_ops_dir / "deploy.yaml", "File")

    repository = f"{options.username}/{app_name}"
    image = docker.image_name(options.username, app_name, version)

    ui.step(f"Checking if image tag '{version}' already exists on Docker Hub")
    if registry.tag_exists(repository, version, options.username, options.token):
        raise ConfigurationError(
            f"Image tag '{version}' already exists on DockerHub private repository"
        )

    ui.step(f"Building {image}")
    docker.build_image(app_dir, image)
    ui.step(f"Scanning {image}")
    docker.scan_image(image)
    ui.step(f"Pushing {image}")
    docker.push_image(image)

    write_release_version(app_ops_dir, version)
    next_version = bump_patch_version(app_dir)
    logger.info("Release process completed for version %s", version)

    return ReleaseResult(
        app_name=app_name,
        released_version=version,
        next_version=next_version,
        image=image,
    )


def run_release_workflow(options: ReleaseOptions) -> int:
    """CLI entry: release and return one of the ``EXIT_*`` constants."""
    ui.phase("RELEASE")
    try:
        result = release_application(options)
    except DeployerError as exc:
        return report_failure("Error running release process", exc)

    ui.success_panel(
        "Released",
        f"{result.image}\nnext version: {result.next_version}",
    )
    return EXIT_SUCCESS
