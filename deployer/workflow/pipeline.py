"""Shared release pipeline and exit-code mapping.

:func:`install_release` is the per-unit sequence used by both application
deploys and chart vendors; :func:`rendered_values` and
:func:`invoke_installer` are its two halves::

    artifact (0600, chowned) → substitute <VAR> tokens → helm upgrade --install

The artifact is removed on every exit path, including substitution and
installer failures.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional, Sequence

from deployer import ui
from deployer.errors import (
    CommandError,
    ConfigurationError,
    DeployerError,
    EnvironmentBindingError,
    OwnershipError,
)
from deployer.process.helm import upgrade_install
from deployer.process.runner import EchoFn
from deployer.render.artifact import values_artifact
from deployer.render.substitute import substitute_placeholders

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_VALIDATION_FAILURE = 1
EXIT_COMMAND_FAILURE = 2
EXIT_UNIT_FAILURE = 3


def exit_code_for(exc: DeployerError) -> int:
    """Map a workflow failure to the process exit code."""
    if isinstance(exc, (ConfigurationError, EnvironmentBindingError)):
        return EXIT_VALIDATION_FAILURE
    if isinstance(exc, (CommandError, OwnershipError)):
        return EXIT_COMMAND_FAILURE
    return EXIT_VALIDATION_FAILURE


def report_failure(title: str, exc: DeployerError) -> int:
    """Log *exc* once, show it to the operator, and return its exit code."""
    body = str(exc)
    if isinstance(exc, CommandError) and exc.output:
        body = f"{body}\n\n{exc.output_text.rstrip()}"
    logger.error("%s: %s", title, exc)
    ui.error_panel(title, body)
    return exit_code_for(exc)


@contextmanager
def rendered_values(
    template: Path,
    *,
    release_name: str,
    variables: Sequence[str],
    environment: str,
    env: Mapping[str, str],
    artifact_dir: Optional[Path] = None,
) -> Iterator[Path]:
    """Yield a private copy of *template* with every variable bound.

    The copy is removed on exit.  Raises :class:`EnvironmentBindingError`
    before yielding when any of *variables* is unset.
    """
    with values_artifact(template, directory=artifact_dir) as values_file:
        ui.step(f"Rendering {template.name} for {release_name}")
        substitute_placeholders(values_file, variables, env, environment=environment)
        yield values_file


def invoke_installer(
    release_name: str,
    chart: str,
    values_file: Path,
    namespace: str,
    *,
    echo: Optional[EchoFn] = None,
) -> bytes:
    """Upgrade-or-install *release_name*; failures carry the helm output."""
    ui.step(f"Deploying {release_name} to namespace {namespace}")
    try:
        return upgrade_install(
            release_name, chart, values_file, namespace, echo=echo,
        )
    except CommandError as exc:
        raise CommandError(
            f"Error running helm upgrade for {release_name}: {exc}",
            command=exc.command,
            returncode=exc.returncode,
            output=exc.output,
        ) from exc


def install_release(
    *,
    release_name: str,
    chart: str,
    template: Path,
    variables: Sequence[str],
    namespace: str,
    environment: str,
    env: Mapping[str, str],
    echo: Optional[EchoFn] = None,
    artifact_dir: Optional[Path] = None,
) -> bytes:
    """Render *template* for *variables* and upgrade-or-install the release.

    Returns the installer's combined output.

    Raises
    ------
    EnvironmentBindingError
        One or more *variables* are unset; the installer is not invoked.
    CommandError
        The installer failed; its captured output is attached.
    """
    with rendered_values(
        template,
        release_name=release_name,
        variables=variables,
        environment=environment,
        env=env,
        artifact_dir=artifact_dir,
    ) as values_file:
        return invoke_installer(release_name, chart, values_file, namespace, echo=echo)
