"""
Mock adapter — stands in for the build tool.

Used by ``--mock`` runs and by tests to exercise the provisioning flow
without running ``bower``.  Every action succeeds unless a canned
receipt was registered for its id.
"""

from __future__ import annotations

from civicrm_provisioner.adapters.base import Adapter, ExecutionContext
from civicrm_provisioner.core.models.action import Receipt


class MockAdapter(Adapter):
    """Records what it was asked to run; never touches the system."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._canned: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def commands(self) -> list[str]:
        """The ``command`` param of every executed action, in order."""
        return [ctx.action.params.get("command", "") for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._canned[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self.set_response(
            action_id, Receipt.failure(adapter=self._name, action_id=action_id, error=error),
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        canned = self._canned.get(context.action.id)
        if canned is not None:
            return canned
        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True, "cwd": context.working_dir},
        )
