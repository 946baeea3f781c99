"""Shell command execution behind a feature flag and a deny-list."""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from ...core.exceptions import (
    CapabilityDisabledError,
    CommandExecutionError,
    UnsafeCommandError,
)
from ...core.logging_config import get_logger
from ..base import Tool

logger = get_logger(__name__)

COMMAND_TIMEOUT_SECONDS = 30.0

# Matched against the lower-cased command. A bare ">" blocks every redirection
# and also any comparison operator in the text.
DANGEROUS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r"rm\s+-rf",
        r"sudo",
        r"passwd",
        r"chmod\s+777",
        r">",
        r"dd\s+if=",
        r"mkfs",
        r"fdisk",
        r"format",
        r"del\s+",
        r"shutdown",
        r"reboot",
        r"halt",
        r"kill\s+-9",
        r"killall",
    )
)


def is_dangerous_command(command: str) -> bool:
    lowered = command.lower()
    return any(pattern.search(lowered) for pattern in DANGEROUS_PATTERNS)


class BashCommandInput(BaseModel):
    command: str = Field(..., min_length=1, description="Shell command to run")
    description: str | None = Field(None, description="Why the command is being run")


class BashCommandTool(Tool):
    name = "bash_command"
    description = (
        "Execute a bash command to gather external data. Provide `command` and an optional "
        "`description`. Example: {\"command\": \"curl -s https://api.github.com/users/octocat\", "
        "\"description\": \"Fetch GitHub user data\"}. Typical uses: curl for web APIs, "
        "grep for text processing. Destructive commands and output redirection are blocked."
    )
    input_model = BashCommandInput

    def __init__(self, enabled: bool, timeout: float = COMMAND_TIMEOUT_SECONDS) -> None:
        self.enabled = enabled
        self.timeout = timeout

    async def run(self, params: BashCommandInput) -> dict[str, Any]:
        if not self.enabled:
            raise CapabilityDisabledError(
                "Bash commands are disabled. Set ENABLE_BASH_COMMANDS=true in .env to enable them."
            )

        if is_dangerous_command(params.command):
            logger.warning("bash_command_blocked", command=params.command)
            raise UnsafeCommandError(
                "Command blocked for security reasons. Dangerous commands are not allowed."
            )

        stdout, stderr = await self._execute(params.command)
        logger.info("bash_command_executed", command=params.command)
        return {
            "command": params.command,
            "description": params.description,
            "stdout": stdout,
            "stderr": stderr,
            "success": True,
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    async def _execute(self, command: str) -> tuple[str, str]:
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CommandExecutionError(f"Failed to start command: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandExecutionError(
                f"Command timed out after {self.timeout:g}s: {command}"
            ) from None

        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise CommandExecutionError(
                f"Command failed with exit code {process.returncode}: {stderr_text.strip()}"
            )
        return stdout_text, stderr_text
