"""
Mock adapter — test double for the live-npm queries.

Returns a canned receipt per action ID (``"npm-version"``,
``"npm-root"``), so tests can simulate any npm without spawning it.
"""

from __future__ import annotations

from n2s_installer.adapters.base import Adapter, ExecutionContext
from n2s_installer.core.models.action import Receipt


class MockAdapter(Adapter):
    """Mock adapter; succeeds with ``default_output`` unless told otherwise."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_output(self, action_id: str, output: str) -> None:
        """Make ``action_id`` succeed with the given stdout."""
        self._responses[action_id] = Receipt.success(
            adapter=self._name,
            action_id=action_id,
            output=output,
        )

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        """Configure a specific action to fail."""
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if context.action.id in self._responses:
            return self._responses[context.action.id]

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
