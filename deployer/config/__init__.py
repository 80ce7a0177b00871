"""Descriptor loading, manifest handling, and per-invocation options."""

from deployer.config.descriptors import (
    check_path_exists,
    check_target_environment,
    load_application,
    load_infrastructure,
    write_release_version,
)
from deployer.config.manifest import (
    bump_patch_version,
    next_patch_version,
    read_manifest,
)
from deployer.config.models import (
    IMAGE_TAG_VARIABLE,
    PRODUCTION_ENVIRONMENT,
    TARGET_ENVIRONMENTS,
    AppManifest,
    DeployOptions,
    FunctionalTestOptions,
    InfrastructureConfig,
    ReleaseDescriptor,
    ReleaseOptions,
    VendorChart,
    VendorConfig,
    VendorsOptions,
)

__all__ = [
    "AppManifest",
    "DeployOptions",
    "FunctionalTestOptions",
    "IMAGE_TAG_VARIABLE",
    "InfrastructureConfig",
    "PRODUCTION_ENVIRONMENT",
    "ReleaseDescriptor",
    "ReleaseOptions",
    "TARGET_ENVIRONMENTS",
    "VendorChart",
    "VendorConfig",
    "VendorsOptions",
    "bump_patch_version",
    "check_path_exists",
    "check_target_environment",
    "load_application",
    "load_infrastructure",
    "next_patch_version",
    "read_manifest",
    "write_release_version",
]
