"""Pydantic models and per-invocation options for deployer.

Defines the data structures for:
- The per-application release descriptor (``deploy.yaml``)
- The shared infrastructure descriptor (``infra.yaml``) and its vendor units
- The application manifest (``package.json``)
- Option bundles handed from the CLI to each workflow
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Environments a deploy may target.
TARGET_ENVIRONMENTS: tuple[str, ...] = ("development", "homolog", "production")

#: Environment whose substituted values are never logged in clear text.
PRODUCTION_ENVIRONMENT: str = "production"

#: Variable always appended to an application's list; bound by the program.
IMAGE_TAG_VARIABLE: str = "IMAGE_TAG"

#: File names inside the operations / infrastructure trees.
DEPLOY_DESCRIPTOR: str = "deploy.yaml"
INFRA_DESCRIPTOR: str = "infra.yaml"
APP_MANIFEST: str = "package.json"


def values_file_name(environment: str) -> str:
    """Return ``values.<environment>.yaml``."""
    return f"values.{environment}.yaml"


# ---------------------------------------------------------------------------
# Descriptor models
# ---------------------------------------------------------------------------


class _Descriptor(BaseModel):
    """Common config: camelCase YAML keys, unknown keys ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReleaseDescriptor(_Descriptor):
    """Per-application ``deploy.yaml``.

    Structure::

        chart: web
        environmentVars:
          - DB_URL
        latestReleaseVersion: 1.2.3
    """

    chart: str
    environment_variables: List[str] = Field(alias="environmentVars")
    latest_release_version: str = Field(alias="latestReleaseVersion")

    def bound_variables(self) -> List[str]:
        """Return the variable list with ``IMAGE_TAG`` appended."""
        return [*self.environment_variables, IMAGE_TAG_VARIABLE]


class VendorChart(_Descriptor):
    """A chart-backed vendor unit."""

    name: str
    chart: str
    namespace: str
    release_name: str = Field(alias="releaseName")
    envs: List[str]


class VendorConfig(_Descriptor):
    """Ordered script and chart vendor units."""

    scripts: List[str] = Field(default_factory=list)
    charts: List[VendorChart] = Field(default_factory=list)


class InfrastructureConfig(_Descriptor):
    """Root model for ``infra.yaml`` (``vendors:`` key)."""

    vendors: VendorConfig = Field(default_factory=VendorConfig)


class AppManifest(_Descriptor):
    """The two ``package.json`` fields deployer cares about."""

    name: str
    version: str = ""


# ---------------------------------------------------------------------------
# Per-invocation options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeployOptions:
    """Inputs of a single application deploy."""

    app_dir: str
    ops_dir: str
    infrastructure_dir: str
    environment: str
    namespace: Optional[str] = None
    image_tag: Optional[str] = None


@dataclass(frozen=True)
class VendorsOptions:
    """Inputs of a vendor batch deploy."""

    infrastructure_dir: str
    environment: str


@dataclass(frozen=True)
class ReleaseOptions:
    """Inputs of a release (build, scan, push, bump)."""

    app_dir: str
    ops_dir: str
    username: str
    token: str


@dataclass(frozen=True)
class FunctionalTestOptions:
    """Inputs of a functional smoke test."""

    app_dir: str
    host: str
    endpoint: str
