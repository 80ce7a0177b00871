"""Descriptor loading, validation, and write-back.

Provides:

- :func:`check_path_exists` — existence check with a caller-supplied label
- :func:`check_target_environment` — closed set of deploy targets
- :func:`load_application` — parse ``<opsDir>/<app>/deploy.yaml``
- :func:`load_infrastructure` — parse ``<infraDir>/infra.yaml``
- :func:`write_release_version` — update ``latestReleaseVersion`` in place

Validation never stops at the first problem: every missing or mistyped
field is collected and reported in a single :class:`DescriptorError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError as RoundTripError

from deployer.config.models import (
    DEPLOY_DESCRIPTOR,
    INFRA_DESCRIPTOR,
    TARGET_ENVIRONMENTS,
    InfrastructureConfig,
    ReleaseDescriptor,
)
from deployer.errors import ConfigurationError, DescriptorError, DescriptorNotFoundError

logger = logging.getLogger(__name__)

_APPLICATION_FIELDS = ("chart", "environmentVars", "latestReleaseVersion")
_CHART_STRING_FIELDS = ("name", "chart", "namespace", "releaseName")


# ---------------------------------------------------------------------------
# Generic checks
# ---------------------------------------------------------------------------


def check_path_exists(path: str | Path, label: str) -> Path:
    """Return *path* as a :class:`Path`, raising if it does not exist."""
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"{label} {p} does not exist")
    return p


def check_target_environment(environment: str) -> None:
    """Raise unless *environment* is one of :data:`TARGET_ENVIRONMENTS`."""
    if environment not in TARGET_ENVIRONMENTS:
        raise ConfigurationError(
            f"invalid environment {environment!r} "
            f"(expected one of: {', '.join(TARGET_ENVIRONMENTS)})"
        )


def _read_yaml_mapping(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise DescriptorNotFoundError(f"File {path} does not exist")
    try:
        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise DescriptorError(f"Failed to parse YAML file {path}: {exc}") from exc
    except OSError as exc:
        raise DescriptorError(f"Failed to read file {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DescriptorError(f"{path} must contain a mapping at the top level")
    return raw


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) and v for v in value)


# ---------------------------------------------------------------------------
# Application descriptor
# ---------------------------------------------------------------------------


def load_application(app_ops_dir: str | Path) -> ReleaseDescriptor:
    """Load and validate ``deploy.yaml`` from *app_ops_dir*.

    A missing file raises :class:`DescriptorNotFoundError`; any field
    problem raises :class:`DescriptorError` listing all of them.
    """
    path = Path(app_ops_dir) / DEPLOY_DESCRIPTOR
    raw = _read_yaml_mapping(path)

    problems: List[str] = [
        f"missing field {name}" for name in _APPLICATION_FIELDS if name not in raw
    ]

    chart = raw.get("chart")
    if "chart" in raw and not (isinstance(chart, str) and chart):
        problems.append("chart must be a non-empty string")

    env_vars = raw.get("environmentVars")
    if env_vars is None:
        env_vars = []
    if "environmentVars" in raw and not _is_string_list(env_vars):
        problems.append("environmentVars must be a list of variable names")

    version = raw.get("latestReleaseVersion")
    if "latestReleaseVersion" in raw and not isinstance(version, str):
        problems.append("latestReleaseVersion is not a string")

    if problems:
        raise DescriptorError(f"Invalid descriptor {path}", problems)

    descriptor = ReleaseDescriptor(
        chart=chart,
        environmentVars=env_vars,
        latestReleaseVersion=version,
    )
    logger.debug("Loaded %s: chart=%s vars=%s", path, descriptor.chart, descriptor.environment_variables)
    return descriptor


def write_release_version(app_ops_dir: str | Path, version: str) -> Path:
    """Set ``latestReleaseVersion`` in ``deploy.yaml``, keeping comments.

    Uses ruamel round-trip mode so key order and operator comments survive.
    """
    path = Path(app_ops_dir) / DEPLOY_DESCRIPTOR
    if not path.is_file():
        raise DescriptorNotFoundError(f"File {path} does not exist")

    rt = YAML()
    rt.preserve_quotes = True
    try:
        with open(path, encoding="utf-8") as fh:
            data = rt.load(fh)
    except (OSError, RoundTripError) as exc:
        raise DescriptorError(f"Error reading YAML file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DescriptorError(f"{path} must contain a mapping at the top level")

    data["latestReleaseVersion"] = version
    try:
        with open(path, "w", encoding="utf-8") as fh:
            rt.dump(data, fh)
    except OSError as exc:
        raise DescriptorError(f"Error writing YAML file {path}: {exc}") from exc
    logger.info("Updated %s with latestReleaseVersion=%s", path, version)
    return path


# ---------------------------------------------------------------------------
# Infrastructure descriptor
# ---------------------------------------------------------------------------


def _chart_problems(index: int, entry: Any) -> List[str]:
    if not isinstance(entry, dict):
        return [f"charts[{index}]: must be a mapping"]

    label = f"charts[{index}]"
    if isinstance(entry.get("name"), str) and entry["name"]:
        label = f"{label} ({entry['name']})"

    missing = [
        field
        for field in _CHART_STRING_FIELDS
        if not (isinstance(entry.get(field), str) and entry[field])
    ]
    if "envs" not in entry:
        missing.append("envs")

    problems: List[str] = []
    if missing:
        problems.append(f"{label}: missing {', '.join(missing)}")
    if "envs" in entry and not (entry["envs"] is None or _is_string_list(entry["envs"])):
        problems.append(f"{label}: envs must be a list of variable names")
    return problems


def load_infrastructure(infrastructure_dir: str | Path) -> InfrastructureConfig:
    """Load and validate ``infra.yaml`` from *infrastructure_dir*.

    Every chart entry is checked for all required fields before anything
    is raised, so one bad chart never hides another.
    """
    path = Path(infrastructure_dir) / INFRA_DESCRIPTOR
    raw = _read_yaml_mapping(path)

    vendors = raw.get("vendors") or {}
    if not isinstance(vendors, dict):
        raise DescriptorError(f"Invalid descriptor {path}", ["vendors must be a mapping"])

    scripts = vendors.get("scripts") or []
    charts = vendors.get("charts") or []
    problems: List[str] = []

    if not isinstance(scripts, list):
        problems.append("scripts must be a list")
        scripts = []
    for index, script in enumerate(scripts):
        if not (isinstance(script, str) and script):
            problems.append(f"scripts[{index}]: empty")

    if not isinstance(charts, list):
        problems.append("charts must be a list")
        charts = []
    for index, entry in enumerate(charts):
        problems.extend(_chart_problems(index, entry))

    if problems:
        raise DescriptorError(f"Invalid descriptor {path}", problems)

    normalised = [{**entry, "envs": entry.get("envs") or []} for entry in charts]
    return InfrastructureConfig.model_validate(
        {"vendors": {"scripts": scripts, "charts": normalised}}
    )
