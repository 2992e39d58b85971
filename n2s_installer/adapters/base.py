"""
Adapter base — the protocol between services and external tools.

Services never spawn processes themselves; they build an Action, hand it
to an adapter inside an ExecutionContext, and inspect the Receipt.  That
keeps the live-npm code paths testable with ``MockAdapter``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from n2s_installer.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    working_dir: str = "."


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available.

        Should be fast and never raise.
        """

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def run(self, context: ExecutionContext) -> Receipt:
        """Validate, then execute; an invalid action yields a failed receipt."""
        valid, error = self.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=error,
            )
        return self.execute(context)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
