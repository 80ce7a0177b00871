"""Tests for deployer.render.artifact — secured values artifacts."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from deployer.errors import ConfigurationError, OwnershipError
from deployer.render import artifact
from deployer.render.artifact import (
    ARTIFACT_MODE,
    create_artifact,
    destroy_artifact,
    scratch_dir,
    values_artifact,
)


@pytest.fixture
def shm(tmp_path: Path) -> Path:
    d = tmp_path / "shm"
    d.mkdir()
    return d


# ── TestScratchDir ───────────────────────────────────────────────────────


class TestScratchDir:
    def test_prefers_volatile_dir(self, monkeypatch, shm):
        monkeypatch.setattr(artifact, "VOLATILE_DIR", shm)
        assert scratch_dir() == shm

    def test_falls_back_to_tempdir(self, monkeypatch, tmp_path):
        monkeypatch.setattr(artifact, "VOLATILE_DIR", tmp_path / "absent")
        assert scratch_dir() != tmp_path / "absent"
        assert scratch_dir().is_dir()


# ── TestCreateArtifact ───────────────────────────────────────────────────


class TestCreateArtifact:
    def test_content_copied(self, shm):
        p = create_artifact(b"key: <VALUE>\n", directory=shm)
        assert p.read_bytes() == b"key: <VALUE>\n"
        assert p.parent == shm

    def test_owner_only_permissions(self, shm):
        p = create_artifact(b"x", directory=shm)
        assert stat.S_IMODE(p.stat().st_mode) == ARTIFACT_MODE

    def test_owned_by_current_user(self, shm):
        p = create_artifact(b"x", directory=shm)
        assert p.stat().st_uid == os.getuid()

    def test_unique_names(self, shm):
        a = create_artifact(b"x", directory=shm)
        b = create_artifact(b"x", directory=shm)
        assert a != b
        assert a.suffix == ".yaml"

    def test_chown_failure_is_fatal_and_cleans_up(self, shm):
        with patch("deployer.render.artifact.os.chown", side_effect=PermissionError("nope")):
            with pytest.raises(OwnershipError, match="ownership"):
                create_artifact(b"secret", directory=shm)
        assert list(shm.iterdir()) == []

    def test_unknown_user_is_fatal(self, shm):
        with patch("deployer.render.artifact.pwd.getpwuid", side_effect=KeyError(1)):
            with pytest.raises(OwnershipError, match="current user"):
                create_artifact(b"secret", directory=shm)
        assert list(shm.iterdir()) == []

    def test_unwritable_directory(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Error writing file"):
            create_artifact(b"x", directory=tmp_path / "missing")


# ── TestDestroyArtifact ──────────────────────────────────────────────────


class TestDestroyArtifact:
    def test_removes_file(self, shm):
        p = create_artifact(b"x", directory=shm)
        destroy_artifact(p)
        assert not p.exists()

    def test_missing_file_ignored(self, shm):
        destroy_artifact(shm / "never-created.yaml")

    def test_os_error_logged_not_raised(self, shm, caplog):
        p = create_artifact(b"x", directory=shm)
        with patch("deployer.render.artifact.os.remove", side_effect=PermissionError("busy")):
            destroy_artifact(p)
        assert "Could not remove" in caplog.text


# ── TestValuesArtifact ───────────────────────────────────────────────────


class TestValuesArtifact:
    def test_removed_after_normal_exit(self, tmp_path, shm):
        tpl = tmp_path / "values.development.yaml"
        tpl.write_text("a: 1\n")
        with values_artifact(tpl, directory=shm) as p:
            assert p.read_text() == "a: 1\n"
        assert not p.exists()

    def test_removed_after_exception(self, tmp_path, shm):
        tpl = tmp_path / "values.development.yaml"
        tpl.write_text("a: 1\n")
        seen = []
        with pytest.raises(RuntimeError):
            with values_artifact(tpl, directory=shm) as p:
                seen.append(p)
                raise RuntimeError("installer exploded")
        assert not seen[0].exists()
        assert list(shm.iterdir()) == []

    def test_missing_template(self, tmp_path, shm):
        with pytest.raises(ConfigurationError, match="Error reading file"):
            with values_artifact(tmp_path / "nope.yaml", directory=shm):
                pass
