"""Exception taxonomy shared by every deployer workflow.

All expected failures derive from :class:`DeployerError` so the workflow
entry points can map them to exit codes in one place.  Anything else is a
bug and is allowed to propagate.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class DeployerError(Exception):
    """Base class for expected, operator-facing failures."""


class ConfigurationError(DeployerError):
    """A directory, file, field or version string is missing or malformed.

    Detected before any external side effect; never retried.
    """

    def __init__(self, message: str, problems: Optional[Sequence[str]] = None) -> None:
        self.problems: List[str] = list(problems or [])
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class DescriptorNotFoundError(ConfigurationError):
    """The backing descriptor file does not exist."""


class DescriptorError(ConfigurationError):
    """The descriptor file exists but cannot be parsed or validated."""


class EnvironmentBindingError(DeployerError):
    """One or more required environment variables could not be bound."""

    def __init__(self, problems: Sequence[str], missing: Optional[Sequence[str]] = None) -> None:
        self.problems: List[str] = list(problems)
        self.missing: List[str] = list(missing or [])
        super().__init__(
            "Error setting environment variables:\n" + "\n".join(self.problems)
        )


class OwnershipError(DeployerError):
    """A values artifact could not be handed to the current user."""


class CommandError(DeployerError):
    """An external command could not start or exited non-zero.

    ``output`` holds whatever was captured (stdout followed by stderr).
    """

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        returncode: Optional[int] = None,
        output: bytes = b"",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(message)

    @property
    def output_text(self) -> str:
        return self.output.decode("utf-8", errors="replace")
