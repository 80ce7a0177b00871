"""External process execution: runner, helm, docker/trivy."""

from deployer.process.docker import (
    SCAN_SEVERITY,
    build_image,
    image_name,
    push_image,
    scan_image,
)
from deployer.process.helm import (
    HELM_BINARY,
    upgrade_install,
    upgrade_install_args,
)
from deployer.process.runner import (
    CommandResult,
    execute_command,
    run_command,
)

__all__ = [
    "CommandResult",
    "HELM_BINARY",
    "SCAN_SEVERITY",
    "build_image",
    "execute_command",
    "image_name",
    "push_image",
    "run_command",
    "scan_image",
    "upgrade_install",
    "upgrade_install_args",
]
