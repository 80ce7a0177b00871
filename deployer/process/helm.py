"""Helm invocation with the fixed release policy.

Every release goes through ``helm upgrade --install`` with
``--create-namespace`` and ``--wait``: install or upgrade, create the
namespace when absent, and block until the release settles.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from deployer.process.runner import EchoFn, execute_command

logger = logging.getLogger(__name__)

HELM_BINARY: str = "helm"


def upgrade_install_args(
    release_name: str,
    chart: str,
    values_file: str | Path,
    namespace: str,
) -> List[str]:
    """Return the argv for an upgrade-or-install of *release_name*."""
    return [
        HELM_BINARY,
        "upgrade",
        "--install",
        release_name,
        str(chart),
        "--values",
        str(values_file),
        "--namespace",
        namespace,
        "--create-namespace",
        "--wait",
    ]


def upgrade_install(
    release_name: str,
    chart: str,
    values_file: str | Path,
    namespace: str,
    *,
    echo: Optional[EchoFn] = None,
) -> bytes:
    """Run ``helm upgrade --install`` and return its combined output.

    Raises :class:`~deployer.errors.CommandError` on failure.
    """
    logger.info("Deploying release %s to namespace %s", release_name, namespace)
    return execute_command(
        upgrade_install_args(release_name, chart, values_file, namespace),
        echo=echo,
    )
