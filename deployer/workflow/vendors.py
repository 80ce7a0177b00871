"""Vendor batch deploy over ``infra.yaml``.

Units run strictly in descriptor order, scripts first, then charts, one
at a time.  A failing unit is logged and recorded, and the batch moves on
to the next unit; the batch as a whole fails afterwards if any unit did.
Problems with ``infra.yaml`` itself abort before the first unit.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from deployer import ui
from deployer.config.descriptors import (
    check_path_exists,
    check_target_environment,
    load_infrastructure,
)
from deployer.config.models import VendorChart, VendorsOptions, values_file_name
from deployer.errors import CommandError, DeployerError
from deployer.process.runner import EchoFn, execute_command
from deployer.workflow.pipeline import (
    EXIT_SUCCESS,
    EXIT_UNIT_FAILURE,
    install_release,
    report_failure,
)

logger = logging.getLogger(__name__)

UNIT_SCRIPT = "script"
UNIT_CHART = "chart"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass
class UnitResult:
    """Outcome of one vendor unit."""

    name: str
    kind: str
    success: bool
    error: str = ""
    output: bytes = b""


@dataclass
class VendorsReport:
    """Per-unit outcomes of a batch, in execution order."""

    environment: str
    units: List[UnitResult] = field(default_factory=list)

    @property
    def failed(self) -> List[UnitResult]:
        return [u for u in self.units if not u.success]

    @property
    def passed(self) -> bool:
        """True when every unit succeeded."""
        return not self.failed


# ---------------------------------------------------------------------------
# Unit pipelines
# ---------------------------------------------------------------------------


def vendor_dir(vendors_root: Path, name: str) -> Path:
    """Return ``<vendors_root>/<lower(name)>``."""
    return vendors_root / name.lower()


def deploy_script(
    vendors_root: Path,
    name: str,
    environment: str,
    *,
    echo: Optional[EchoFn] = None,
) -> bytes:
    """Run ``<vendor>/deploy.<env>.sh``; no templating step."""
    directory = check_path_exists(vendor_dir(vendors_root, name), "Vendor directory")
    logger.info("Vendor directory %s", directory)
    script = check_path_exists(
        directory / f"deploy.{environment}.sh", "Deploy script",
    )
    try:
        return execute_command([str(script)], echo=echo)
    except CommandError as exc:
        raise CommandError(
            f"Error running deploy script {script}: {exc}",
            command=exc.command,
            returncode=exc.returncode,
            output=exc.output,
        ) from exc


def deploy_chart(
    vendors_root: Path,
    chart: VendorChart,
    environment: str,
    *,
    env: Mapping[str, str],
    echo: Optional[EchoFn] = None,
    artifact_dir: Optional[Path] = None,
) -> bytes:
    """Render the vendor's values template and install its chart."""
    directory = check_path_exists(vendor_dir(vendors_root, chart.name), "Vendor directory")
    logger.info("Vendor directory %s", directory)
    template = check_path_exists(
        directory / values_file_name(environment), "Helm values file",
    )
    return install_release(
        release_name=chart.release_name,
        chart=chart.chart,
        template=template,
        variables=chart.envs,
        namespace=chart.namespace,
        environment=environment,
        env=env,
        echo=echo,
        artifact_dir=artifact_dir,
    )


def _run_unit(name: str, kind: str, action: Callable[[], bytes]) -> UnitResult:
    ui.step(f"Deploying vendor {name} ({kind})")
    try:
        output = action()
    except DeployerError as exc:
        logger.error("Vendor %s (%s) failed: %s", name, kind, exc)
        ui.unit_outcome(name, kind, str(exc))
        return UnitResult(
            name=name,
            kind=kind,
            success=False,
            error=str(exc),
            output=getattr(exc, "output", b""),
        )
    logger.info("Vendor %s deployed", name)
    ui.unit_outcome(name, kind)
    return UnitResult(name=name, kind=kind, success=True, output=output)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


def deploy_vendors(
    options: VendorsOptions,
    *,
    env: Optional[Mapping[str, str]] = None,
    echo: Optional[EchoFn] = None,
    artifact_dir: Optional[Path] = None,
) -> VendorsReport:
    """Deploy every vendor unit and return the per-unit report.

    Raises :class:`DeployerError` only for batch-level problems (bad
    environment, missing or invalid ``infra.yaml``).
    """
    source: Mapping[str, str] = os.environ if env is None else env
    environment = options.environment

    logger.info("Running vendors deploy for environment %s", environment)
    check_target_environment(environment)
    infra_dir = check_path_exists(options.infrastructure_dir, "Infrastructure directory")
    infra = load_infrastructure(infra_dir)
    vendors_root = infra_dir / "vendors"

    report = VendorsReport(environment=environment)
    for name in infra.vendors.scripts:
        report.units.append(
            _run_unit(
                name,
                UNIT_SCRIPT,
                lambda name=name: deploy_script(vendors_root, name, environment, echo=echo),
            )
        )
    for chart in infra.vendors.charts:
        report.units.append(
            _run_unit(
                chart.name,
                UNIT_CHART,
                lambda chart=chart: deploy_chart(
                    vendors_root,
                    chart,
                    environment,
                    env=source,
                    echo=echo,
                    artifact_dir=artifact_dir,
                ),
            )
        )
    return report


def run_vendors_workflow(options: VendorsOptions) -> int:
    """CLI entry: deploy vendors and return one of the ``EXIT_*`` constants."""
    ui.phase("VENDORS")
    try:
        report = deploy_vendors(options)
    except DeployerError as exc:
        return report_failure("Error running vendors deploy", exc)

    if not report.passed:
        lines = [f"{u.kind} {u.name}: {u.error}" for u in report.failed]
        logger.error("%d of %d vendor unit(s) failed", len(report.failed), len(report.units))
        ui.error_panel("Vendor units failed", "\n".join(lines))
        return EXIT_UNIT_FAILURE

    ui.success_panel("Vendors deployed", f"{len(report.units)} unit(s) in {options.environment}")
    return EXIT_SUCCESS
