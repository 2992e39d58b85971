"""
Domain models for the installer.

Re-exported here for convenient access:

    from n2s_installer.core.models import PatchProfile, OperationError, ExitCode
"""

from n2s_installer.core.models.action import Action, Receipt
from n2s_installer.core.models.errors import (
    ExitCode,
    InvalidArgumentError,
    OperationError,
    classify,
)
from n2s_installer.core.models.profile import PatchProfile, TargetManifest
from n2s_installer.core.models.state import (
    InstallationState,
    PresenceTally,
    StatusClassification,
)

__all__ = [
    # action.py
    "Action",
    # errors.py
    "ExitCode",
    "InstallationState",
    "InvalidArgumentError",
    "OperationError",
    # profile.py
    "PatchProfile",
    # state.py
    "PresenceTally",
    "Receipt",
    "StatusClassification",
    "TargetManifest",
    "classify",
]
