"""Application manifest (``package.json``) helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

from deployer.config.models import APP_MANIFEST, AppManifest
from deployer.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _manifest_path(app_dir: str | Path) -> Path:
    return Path(app_dir) / APP_MANIFEST


def read_manifest_data(app_dir: str | Path) -> Dict[str, Any]:
    """Return the raw ``package.json`` mapping from *app_dir*."""
    path = _manifest_path(app_dir)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"failed to read {path}: file does not exist") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"failed to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return data


def read_manifest(
    app_dir: str | Path,
    fields: Sequence[str] = ("name",),
) -> AppManifest:
    """Load ``package.json`` and require every name in *fields*.

    All missing fields are reported together.
    """
    data = read_manifest_data(app_dir)
    missing = [f for f in fields if not isinstance(data.get(f), str) or not data[f]]
    if missing:
        raise ConfigurationError(
            f"the following fields are missing from {APP_MANIFEST}",
            missing,
        )
    return AppManifest.model_validate(data)


def next_patch_version(version: str) -> str:
    """Return *version* with its patch component incremented.

    >>> next_patch_version("1.2.3")
    '1.2.4'
    """
    parts = version.split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ConfigurationError(f"invalid version format {version!r} (expected X.Y.Z)")
    major, minor, patch = parts
    return f"{major}.{minor}.{int(patch) + 1}"


def bump_patch_version(app_dir: str | Path) -> str:
    """Increment the patch version in ``package.json`` and return it."""
    path = _manifest_path(app_dir)
    data = read_manifest_data(app_dir)

    version = data.get("version")
    if not isinstance(version, str):
        raise ConfigurationError("version is not a string")

    new_version = next_patch_version(version)
    data["version"] = new_version
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"failed to write {path}: {exc}") from exc
    logger.info("Version bumped to %s", new_version)
    return new_version
