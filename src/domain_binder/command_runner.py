"""
Host command runner.

Runs external CLI tools (the Azure CLI) as subprocesses without a shell and
captures their output. Arguments that carry secrets are masked whenever a
command line is rendered for logs or errors.
"""

import asyncio
import json
import shutil
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from .exceptions import PrerequisiteError, ProviderError


MASK_VALUE = "***MASKED***"


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def json(self) -> Any:
        """Parse stdout as JSON (None for empty output)."""
        text = self.stdout.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ProviderError(
                code="invalid_json",
                message=f"Command returned invalid JSON: {e}",
                details={"response": text[:2000]},
            ) from e


@runtime_checkable
class CommandRunner(Protocol):
    """Interface for running host commands."""

    async def run(
        self,
        args: Sequence[str],
        secrets: Sequence[str] = (),
        timeout: Optional[float] = None,
        interactive: bool = False,
    ) -> CommandResult:
        ...


def mask_args(args: Sequence[str], secrets: Sequence[str]) -> list[str]:
    """Replace secret values in an argument list."""
    hidden = {s for s in secrets if s}
    return [MASK_VALUE if arg in hidden else arg for arg in args]


class SubprocessRunner:
    """Runs commands with asyncio subprocesses."""

    def __init__(self, default_timeout: float = 900.0) -> None:
        self._default_timeout = default_timeout

    async def run(
        self,
        args: Sequence[str],
        secrets: Sequence[str] = (),
        timeout: Optional[float] = None,
        interactive: bool = False,
    ) -> CommandResult:
        """
        Run a command and wait for it to finish.

        Interactive commands inherit the terminal and produce no captured output.

        Raises:
            PrerequisiteError: If the executable cannot be found
            ProviderError: If the command exceeds its timeout
        """
        timeout = timeout or self._default_timeout
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=None if interactive else asyncio.subprocess.DEVNULL,
                stdout=None if interactive else asyncio.subprocess.PIPE,
                stderr=None if interactive else asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise PrerequisiteError(
                code="tool_not_found",
                message=f"{args[0]} not found",
                details={"tool": args[0]},
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ProviderError(
                code="command_timeout",
                message=f"Command timed out after {timeout}s",
                details={"command": mask_args(args, secrets)},
            ) from e

        return CommandResult(
            args=mask_args(args, secrets),
            returncode=process.returncode,
            stdout=(stdout or b"").decode("utf-8", errors="replace"),
            stderr=(stderr or b"").decode("utf-8", errors="replace"),
        )


def tool_available(name: str) -> bool:
    """Return True if an executable is on PATH."""
    return shutil.which(name) is not None
