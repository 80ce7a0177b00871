"""Tests for deployer.config.descriptors — deploy.yaml / infra.yaml."""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from deployer.config.descriptors import (
    check_path_exists,
    check_target_environment,
    load_application,
    load_infrastructure,
    write_release_version,
)
from deployer.config.models import ReleaseDescriptor
from deployer.errors import ConfigurationError, DescriptorError, DescriptorNotFoundError


def _write(directory: Path, name: str, text: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    p = directory / name
    p.write_text(textwrap.dedent(text), encoding="utf-8")
    return p


# ── Generic checks ──────────────────────────────────────────────────────


class TestChecks:
    def test_existing_path_returned(self, tmp_path):
        assert check_path_exists(str(tmp_path), "Directory") == tmp_path

    def test_missing_path_raises_with_label(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Chart .* does not exist"):
            check_path_exists(tmp_path / "nope", "Chart")

    @pytest.mark.parametrize("env", ["development", "homolog", "production"])
    def test_valid_environments(self, env):
        check_target_environment(env)

    def test_invalid_environment(self):
        with pytest.raises(ConfigurationError, match="invalid environment 'staging'"):
            check_target_environment("staging")


# ── Application descriptor ──────────────────────────────────────────────


class TestLoadApplication:
    def test_happy_path(self, tmp_path):
        _write(tmp_path, "deploy.yaml", """\
            chart: web
            environmentVars:
              - DB_URL
              - API_KEY
            latestReleaseVersion: 1.2.3
        """)
        d = load_application(tmp_path)
        assert isinstance(d, ReleaseDescriptor)
        assert d.chart == "web"
        assert d.environment_variables == ["DB_URL", "API_KEY"]
        assert d.latest_release_version == "1.2.3"

    def test_image_tag_appended(self, tmp_path):
        _write(tmp_path, "deploy.yaml", """\
            chart: web
            environmentVars: [DB_URL]
            latestReleaseVersion: 1.2.3
        """)
        assert load_application(tmp_path).bound_variables() == ["DB_URL", "IMAGE_TAG"]

    def test_unknown_fields_ignored(self, tmp_path):
        _write(tmp_path, "deploy.yaml", """\
            chart: web
            environmentVars: []
            latestReleaseVersion: 0.0.1
            owner: platform-team
        """)
        assert load_application(tmp_path).chart == "web"

    def test_null_variable_list_is_empty(self, tmp_path):
        _write(tmp_path, "deploy.yaml", """\
            chart: web
            environmentVars:
            latestReleaseVersion: 0.0.1
        """)
        assert load_application(tmp_path).environment_variables == []

    def test_missing_file_is_distinct(self, tmp_path):
        with pytest.raises(DescriptorNotFoundError):
            load_application(tmp_path)

    def test_malformed_yaml_is_not_not_found(self, tmp_path):
        _write(tmp_path, "deploy.yaml", "chart: [unclosed\n")
        with pytest.raises(DescriptorError) as ei:
            load_application(tmp_path)
        assert not isinstance(ei.value, DescriptorNotFoundError)

    def test_all_missing_fields_reported(self, tmp_path):
        _write(tmp_path, "deploy.yaml", "owner: nobody\n")
        with pytest.raises(DescriptorError) as ei:
            load_application(tmp_path)
        assert ei.value.problems == [
            "missing field chart",
            "missing field environmentVars",
            "missing field latestReleaseVersion",
        ]

    def test_non_string_version_rejected(self, tmp_path):
        _write(tmp_path, "deploy.yaml", """\
            chart: web
            environmentVars: []
            latestReleaseVersion: 1.2
        """)
        with pytest.raises(DescriptorError, match="latestReleaseVersion is not a string"):
            load_application(tmp_path)

    def test_non_string_variable_rejected(self, tmp_path):
        _write(tmp_path, "deploy.yaml", """\
            chart: web
            environmentVars: [DB_URL, 3]
            latestReleaseVersion: 1.2.3
        """)
        with pytest.raises(DescriptorError, match="environmentVars"):
            load_application(tmp_path)

    def test_top_level_list_rejected(self, tmp_path):
        _write(tmp_path, "deploy.yaml", "- a\n- b\n")
        with pytest.raises(DescriptorError, match="mapping"):
            load_application(tmp_path)


class TestWriteReleaseVersion:
    def test_updates_version_and_keeps_comments(self, tmp_path):
        p = _write(tmp_path, "deploy.yaml", """\
            # owned by the platform team
            chart: web  # helm chart under infra/charts
            environmentVars:
              - DB_URL
            latestReleaseVersion: 1.2.3
        """)
        write_release_version(tmp_path, "1.2.4")
        text = p.read_text()
        assert "# owned by the platform team" in text
        assert "# helm chart under infra/charts" in text
        assert load_application(tmp_path).latest_release_version == "1.2.4"

    def test_key_order_preserved(self, tmp_path):
        p = _write(tmp_path, "deploy.yaml", """\
            latestReleaseVersion: 0.0.1
            chart: web
            environmentVars: []
        """)
        write_release_version(tmp_path, "0.0.2")
        assert p.read_text().splitlines()[0] == "latestReleaseVersion: 0.0.2"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DescriptorNotFoundError):
            write_release_version(tmp_path, "1.0.0")

    def test_unwritable_file_wrapped(self, tmp_path):
        _write(tmp_path, "deploy.yaml", "chart: web\nlatestReleaseVersion: 1.2.3\n")
        real_open = open

        def read_only_open(file, mode="r", *args, **kwargs):
            if "w" in mode:
                raise PermissionError(13, "Permission denied", str(file))
            return real_open(file, mode, *args, **kwargs)

        with patch("deployer.config.descriptors.open", read_only_open, create=True):
            with pytest.raises(DescriptorError, match="Error writing YAML file") as ei:
                write_release_version(tmp_path, "1.2.4")
        assert isinstance(ei.value.__cause__, PermissionError)


# ── Infrastructure descriptor ───────────────────────────────────────────


INFRA_OK = """\
    vendors:
      scripts:
        - Cert-Manager
        - ingress
      charts:
        - name: Redis
          chart: bitnami/redis
          namespace: cache
          releaseName: redis
          envs:
            - REDIS_PASSWORD
        - name: grafana
          chart: grafana/grafana
          namespace: monitoring
          releaseName: grafana
          envs: []
          extra: ignored
"""


class TestLoadInfrastructure:
    def test_happy_path_keeps_order(self, tmp_path):
        _write(tmp_path, "infra.yaml", INFRA_OK)
        cfg = load_infrastructure(tmp_path)
        assert cfg.vendors.scripts == ["Cert-Manager", "ingress"]
        assert [c.name for c in cfg.vendors.charts] == ["Redis", "grafana"]
        redis = cfg.vendors.charts[0]
        assert redis.chart == "bitnami/redis"
        assert redis.namespace == "cache"
        assert redis.release_name == "redis"
        assert redis.envs == ["REDIS_PASSWORD"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DescriptorNotFoundError):
            load_infrastructure(tmp_path)

    def test_empty_file_is_empty_config(self, tmp_path):
        _write(tmp_path, "infra.yaml", "")
        cfg = load_infrastructure(tmp_path)
        assert cfg.vendors.scripts == []
        assert cfg.vendors.charts == []

    def test_one_chart_missing_namespace(self, tmp_path):
        _write(tmp_path, "infra.yaml", """\
            vendors:
              charts:
                - name: ok
                  chart: repo/ok
                  namespace: ns
                  releaseName: ok
                  envs: []
                - name: redis
                  chart: bitnami/redis
                  releaseName: redis
                  envs: []
        """)
        with pytest.raises(DescriptorError) as ei:
            load_infrastructure(tmp_path)
        assert ei.value.problems == ["charts[1] (redis): missing namespace"]

    def test_all_charts_checked_before_failing(self, tmp_path):
        _write(tmp_path, "infra.yaml", """\
            vendors:
              charts:
                - name: a
                  envs: []
                - chart: repo/b
                  namespace: ""
                  releaseName: b
        """)
        with pytest.raises(DescriptorError) as ei:
            load_infrastructure(tmp_path)
        assert ei.value.problems == [
            "charts[0] (a): missing chart, namespace, releaseName",
            "charts[1]: missing name, namespace, envs",
        ]

    def test_null_envs_accepted(self, tmp_path):
        _write(tmp_path, "infra.yaml", """\
            vendors:
              charts:
                - name: a
                  chart: repo/a
                  namespace: ns
                  releaseName: a
                  envs:
        """)
        assert load_infrastructure(tmp_path).vendors.charts[0].envs == []

    def test_bad_envs_type(self, tmp_path):
        _write(tmp_path, "infra.yaml", """\
            vendors:
              charts:
                - name: a
                  chart: repo/a
                  namespace: ns
                  releaseName: a
                  envs: REDIS_PASSWORD
        """)
        with pytest.raises(DescriptorError, match="envs must be a list"):
            load_infrastructure(tmp_path)

    def test_empty_script_name(self, tmp_path):
        _write(tmp_path, "infra.yaml", """\
            vendors:
              scripts: [ok, ""]
        """)
        with pytest.raises(DescriptorError, match=r"scripts\[1\]: empty"):
            load_infrastructure(tmp_path)
