"""
Action and Receipt models — the contract with external tools.

An Action names a command to hand to an adapter. A Receipt is what
comes back: the adapter never raises, failures are captured here and
turned into exceptions by the step that asked for the work.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """A requested piece of external work (e.g. running ``bower install``)."""

    id: str
    name: str = ""
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """What an adapter reports back for one action."""

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    duration_ms: int = 0

    output: str = ""                # stdout, or the reason for a skip
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A receipt for work that was deliberately not done."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
