"""Docker Hub tag lookup.

Used by the release workflow to refuse overwriting an already published
image tag.
"""

from __future__ import annotations

import logging

import requests

from deployer.errors import CommandError

logger = logging.getLogger(__name__)

DOCKER_HUB_API: str = "https://hub.docker.com/v2/repositories"

#: Seconds before a registry request is abandoned.
REQUEST_TIMEOUT: float = 30.0


def tag_url(repository: str, tag: str) -> str:
    """Return the Docker Hub API URL for *repository*:*tag*."""
    return f"{DOCKER_HUB_API}/{repository}/tags/{tag}"


def tag_exists(repository: str, tag: str, username: str, token: str) -> bool:
    """Return *True* if *tag* is already published under *repository*.

    200 means present, 404 means absent; anything else is an error.
    """
    url = tag_url(repository, tag)
    logger.debug("GET %s", url)
    try:
        resp = requests.get(url, auth=(username, token), timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise CommandError(f"failed to check DockerHub tag existence: {exc}") from exc

    if resp.status_code == 200:
        return True
    if resp.status_code == 404:
        return False
    raise CommandError(
        f"unexpected status code from {url}: {resp.status_code}",
        command=f"GET {url}",
        output=resp.content or b"",
    )
