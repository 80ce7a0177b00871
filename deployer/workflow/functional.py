"""Functional smoke test against a deployed application endpoint."""

from __future__ import annotations

import logging
from typing import List

import requests

from deployer import ui
from deployer.config.descriptors import check_path_exists
from deployer.config.manifest import read_manifest
from deployer.config.models import FunctionalTestOptions
from deployer.errors import CommandError, DeployerError
from deployer.workflow.pipeline import EXIT_SUCCESS, report_failure

logger = logging.getLogger(__name__)

#: Seconds before an endpoint request is abandoned.
REQUEST_TIMEOUT: float = 30.0


def endpoint_url(host: str, endpoint: str) -> str:
    """Return ``http://<host>/<endpoint>``."""
    return f"http://{host}/{endpoint.lstrip('/')}"


def check_endpoint(url: str) -> bool:
    """GET *url* expecting JSON and a 200; log the response body."""
    ui.step(f"Testing endpoint: {url}")
    try:
        resp = requests.get(
            url,
            headers={"Accept": "application/json"},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.error("Error sending HTTP request to %s: %s", url, exc)
        return False

    if resp.status_code != 200:
        logger.error("Non-200 status code from %s: %d", url, resp.status_code)
        return False

    logger.info("Response: %s", resp.text)
    return True


def run_functional_test(options: FunctionalTestOptions) -> None:
    """Check every host; raise listing all hosts that failed."""
    logger.info("Checking if the application directory exists: %s", options.app_dir)
    app_dir = check_path_exists(options.app_dir, "Directory")
    app_name = read_manifest(app_dir, ("name",)).name
    logger.info("Testing application: %s", app_name)

    failed_hosts: List[str] = []
    for host in [options.host]:
        if not check_endpoint(endpoint_url(host, options.endpoint)):
            failed_hosts.append(host)

    if failed_hosts:
        raise CommandError(
            f"Failed to test the following hosts: {', '.join(failed_hosts)}"
        )
    logger.info("All tests passed!")


def run_functional_workflow(options: FunctionalTestOptions) -> int:
    """CLI entry: run the functional test and return an ``EXIT_*`` code."""
    ui.phase("FUNCTIONAL TEST")
    try:
        run_functional_test(options)
    except DeployerError as exc:
        return report_failure("Error running functional test", exc)
    ui.ok("All tests passed!")
    return EXIT_SUCCESS
