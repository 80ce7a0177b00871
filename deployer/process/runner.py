"""External command runner with concurrent output draining.

Every external tool (``helm``, ``docker``, ``trivy``, vendor scripts) runs
through :func:`run_command`.  Two reader tasks drain stdout and stderr at
the same time, echoing each line as it arrives, so a chatty stream can
never fill its pipe and stall the child while the other is being read.
The call returns only once the process has exited **and** both readers
have reached end-of-file.
"""

from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import IO, Callable, Dict, Optional, Sequence

from deployer import ui
from deployer.errors import CommandError

logger = logging.getLogger(__name__)

#: Callable receiving each output line (without trailing newline).
EchoFn = Callable[[str], None]

# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: str
    returncode: Optional[int]
    stdout: bytes = b""
    stderr: bytes = b""
    error: str = ""

    @property
    def success(self) -> bool:
        return not self.error and self.returncode == 0

    @property
    def output(self) -> bytes:
        """stdout buffer followed by stderr buffer."""
        return self.stdout + self.stderr


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _drain(stream: IO[bytes], echo: EchoFn) -> bytes:
    """Read *stream* line by line until EOF, echoing and buffering.

    A failing *echo* (closed console, broken pipe) stops the echo only;
    the stream is still read and buffered to EOF.
    """
    chunks = []
    echoing = True
    with stream:
        for raw in iter(stream.readline, b""):
            line = raw.rstrip(b"\r\n")
            if echoing:
                try:
                    echo(line.decode("utf-8", errors="replace"))
                except (OSError, ValueError) as exc:
                    echoing = False
                    logger.warning("Output echo stopped: %s", exc)
            chunks.append(line + b"\n")
    return b"".join(chunks)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def run_command(
    args: Sequence[str],
    *,
    echo: Optional[EchoFn] = None,
    cwd: Optional[str] = None,
    extra_env: Optional[Dict[str, str]] = None,
) -> CommandResult:
    """Run *args* and return a :class:`CommandResult`; never raises.

    *echo* defaults to :func:`deployer.ui.stream_line`.
    """
    echo_fn = echo or ui.stream_line
    command = " ".join(args)
    env = None
    if extra_env:
        env = {**os.environ, **extra_env}

    logger.info("Running command: %s", command)

    try:
        proc = subprocess.Popen(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            cwd=cwd,
            env=env,
        )
    except OSError as exc:
        return CommandResult(
            command=command,
            returncode=None,
            error=f"error starting command: {exc}",
        )

    assert proc.stdout is not None and proc.stderr is not None
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="drain") as pool:
        out_future = pool.submit(_drain, proc.stdout, echo_fn)
        err_future = pool.submit(_drain, proc.stderr, echo_fn)
        returncode = proc.wait()
        stdout = out_future.result()
        stderr = err_future.result()

    result = CommandResult(
        command=command,
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )
    if returncode != 0:
        result.error = f"command failed: exit status {returncode}"
        logger.error("Command failed (rc=%d): %s", returncode, command)
    return result


def execute_command(
    args: Sequence[str],
    *,
    echo: Optional[EchoFn] = None,
    cwd: Optional[str] = None,
    extra_env: Optional[Dict[str, str]] = None,
) -> bytes:
    """Run *args* and return its combined output.

    Raises
    ------
    CommandError
        If the command cannot start or exits non-zero.  The captured
        output (possibly empty) is attached as ``output``.
    """
    result = run_command(args, echo=echo, cwd=cwd, extra_env=extra_env)
    if not result.success:
        raise CommandError(
            f"{result.command}: {result.error}",
            command=result.command,
            returncode=result.returncode,
            output=result.output,
        )
    return result.output
