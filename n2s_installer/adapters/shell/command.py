"""
Shell command adapter — run a command and capture its stdout.

Used for the two live-npm queries (``npm --version``, ``npm root -g``).
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys
import time
from pathlib import Path

from n2s_installer.adapters.base import Adapter, ExecutionContext
from n2s_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


class ShellCommandAdapter(Adapter):
    """Execute shell commands and capture output.

    Action params:
        command (str): The command to execute.
        shell (bool): Whether to run through the shell (default: True,
            so that ``npm`` resolves to ``npm.cmd`` on Windows).
        timeout (int): Timeout in seconds (default: 60).
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        if sys.platform == "win32":
            return shutil.which("cmd") is not None
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.action.params.get("command", "")
        if not command:
            return False, "Missing required param: 'command'"

        if not Path(context.working_dir).is_dir():
            return False, f"Working directory does not exist: {context.working_dir}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = context.action.params.get("command", "")
        use_shell = context.action.params.get("shell", True)
        timeout = context.action.params.get("timeout", DEFAULT_TIMEOUT)

        logger.debug("Executing: %s (cwd=%s)", command, context.working_dir)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command if use_shell else shlex.split(command),
                shell=use_shell,
                cwd=context.working_dir,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": command, "timeout": timeout},
            )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={"command": command, "return_code": 0, "stderr": stderr},
            )

        logger.debug("%s exited with %d: %s", command, result.returncode, stderr)
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=stderr or f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={
                "command": command,
                "return_code": result.returncode,
                "stdout": output,
            },
        )
