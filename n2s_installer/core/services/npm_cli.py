"""
Live npm queries — ``npm --version`` and ``npm root -g``.

Both go through the shell adapter.  A failed receipt of either kind
(spawn error, non-zero exit, timeout, empty output) means no usable npm
is on the PATH, so it is classified MANAGER_NOT_FOUND.
"""

from __future__ import annotations

import logging

from n2s_installer.adapters.base import Adapter, ExecutionContext
from n2s_installer.adapters.shell.command import ShellCommandAdapter
from n2s_installer.core.models.action import Action
from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.models.profile import PatchProfile

logger = logging.getLogger(__name__)

VERSION_ACTION = "npm-version"
ROOT_ACTION = "npm-root"


def run_npm_query(action_id: str, command: str, shell: Adapter | None = None) -> str:
    """Run ``command`` and return its trimmed stdout.

    Raises:
        OperationError: MANAGER_NOT_FOUND if the command fails or prints nothing.
    """
    adapter = shell or ShellCommandAdapter()
    receipt = adapter.run(
        ExecutionContext(action=Action(id=action_id, params={"command": command}))
    )
    output = receipt.output.strip()
    if receipt.failed or not output:
        logger.info("`%s` failed: %s", command, receipt.error or "no output")
        raise OperationError(
            f"could not get information from `{command}`",
            ExitCode.MANAGER_NOT_FOUND,
        )
    return output


def query_live_version(profile: PatchProfile, shell: Adapter | None = None) -> str:
    return run_npm_query(VERSION_ACTION, profile.version_command, shell)


def query_global_root(profile: PatchProfile, shell: Adapter | None = None) -> str:
    return run_npm_query(ROOT_ACTION, profile.root_command, shell)
