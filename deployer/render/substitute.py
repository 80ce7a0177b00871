"""In-place ``<VAR>`` placeholder substitution for values artifacts.

Each variable is applied to the file in list order, one full rewrite per
variable, so a value written by an earlier variable is visible to the
ones that follow.  Tokens are matched exactly: ``<FOO>`` never touches
``<FOOBAR>`` or ``<BARFOO>``.  Missing variables do not stop the run;
every one of them is reported together at the end.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Mapping, Sequence

from deployer.config.models import PRODUCTION_ENVIRONMENT
from deployer.errors import EnvironmentBindingError

logger = logging.getLogger(__name__)

#: Replacement shown in logs for every value bound in production.
MASK: str = "******"


def mask_sensitive(value: str, environment: str) -> str:
    """Return :data:`MASK` in production, *value* otherwise."""
    if environment == PRODUCTION_ENVIRONMENT:
        return MASK
    return value


def token_pattern(name: str) -> re.Pattern[str]:
    """Compile the exact ``<name>`` token matcher."""
    return re.compile("<" + re.escape(name) + ">")


def _rewrite(path: Path, name: str, value: str) -> int:
    pattern = token_pattern(name)
    replaced = 0
    out: List[str] = []
    with open(path, encoding="utf-8", newline="") as fh:
        for line in fh:
            new_line, count = pattern.subn(lambda _m: value, line)
            replaced += count
            out.append(new_line)
    # Truncating write keeps the artifact's inode, mode and owner.
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.writelines(out)
    return replaced


def apply_placeholders(
    path: Path,
    names: Sequence[str],
    env: Mapping[str, str],
    *,
    environment: str = "",
) -> List[str]:
    """Substitute each of *names* from *env* into *path*.

    Returns the list of per-variable problems (empty on full success).
    Use :func:`substitute_placeholders` to raise instead.
    """
    problems: List[str] = []
    for name in names:
        value = env.get(name) if name else None
        if not name or not value:
            problems.append(f"Environment variable {name} not set")
            continue

        logger.info(
            "Setting environment variable %s=%s",
            name,
            mask_sensitive(value, environment),
        )
        try:
            count = _rewrite(Path(path), name, value)
        except (OSError, UnicodeError) as exc:
            problems.append(f"Error setting environment variable {name}: {exc}")
            continue
        logger.debug("Environment variable %s set (%d occurrence(s))", name, count)
    return problems


def substitute_placeholders(
    path: Path,
    names: Sequence[str],
    env: Mapping[str, str],
    *,
    environment: str = "",
) -> None:
    """Like :func:`apply_placeholders` but raise on any problem.

    Raises
    ------
    EnvironmentBindingError
        Aggregating every per-variable problem; ``missing`` lists the
        names that were unset or empty.
    """
    problems = apply_placeholders(path, names, env, environment=environment)
    if problems:
        missing = [n for n in names if not n or not env.get(n)]
        raise EnvironmentBindingError(problems, missing=missing)
