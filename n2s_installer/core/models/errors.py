"""
Error model — one exception type, classified by exit code.

Filesystem primitives raise plain ``OSError``s.  The service that first
sees a failure wraps it in an ``OperationError`` carrying an ``ExitCode``;
orchestrators only fill in the default when nothing upstream did.  The
CLI maps ``exit_code`` straight to the process exit status.

The numeric values are the ones the shell scripts around the installer
have always relied on, so they must not change.
"""

from __future__ import annotations

import errno
from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit status for each failure class."""

    INVALID_ARGUMENT = 2
    MANAGER_NOT_FOUND = 11
    WRONG_VERSION = 12
    BAD_INSTALLATION = 13
    LEFTOVERS_DETECTED = 14
    FILESYSTEM_ACTION_FAILED = 15
    BAD_PROJECT_SOURCE = 19


class OperationError(Exception):
    """A classified failure of an install, uninstall, or status operation.

    Attributes:
        message: Human-readable description.
        exit_code: Failure class, or None until an orchestrator assigns one.
        code: errno symbol of the underlying OS error (e.g. ``"ENOENT"``).
    """

    def __init__(
        self,
        message: str,
        exit_code: ExitCode | None = None,
        *,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.code = code

    @classmethod
    def from_os_error(
        cls,
        err: OSError,
        exit_code: ExitCode | None = None,
        message: str | None = None,
    ) -> OperationError:
        """Wrap an ``OSError``, keeping its errno symbol."""
        return cls(message or _describe(err), exit_code, code=errno_symbol(err))

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "exit_code": int(self.exit_code) if self.exit_code is not None else None,
            "code": self.code,
        }


class InvalidArgumentError(OperationError, ValueError):
    """Malformed call; raised before any filesystem access."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ExitCode.INVALID_ARGUMENT)


def errno_symbol(err: BaseException) -> str | None:
    """Return the errno name of an OS error (``"ENOENT"``), if any."""
    if isinstance(err, OperationError):
        return err.code
    num = getattr(err, "errno", None)
    if isinstance(num, int):
        return errno.errorcode.get(num)
    return None


def classify(err: BaseException, default: ExitCode) -> OperationError:
    """Return ``err`` as a classified ``OperationError``.

    An error that already carries an exit code is returned unchanged.
    An unclassified ``OperationError`` gets ``default``.  Anything else is
    wrapped; callers should ``raise classify(e, ...) from e`` so the
    original stays on the chain.
    """
    if isinstance(err, OperationError):
        if err.exit_code is None:
            err.exit_code = default
        return err
    if isinstance(err, OSError):
        return OperationError.from_os_error(err, default)
    return OperationError(str(err) or type(err).__name__, default)


def _describe(err: OSError) -> str:
    if err.strerror and err.filename:
        return f"{err.strerror}: {err.filename}"
    return str(err)
