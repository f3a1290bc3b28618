"""
Adapter base — the contract between provisioning steps and external tools.

A step never shells out itself: it builds an Action, hands it to an
adapter and inspects the Receipt.  Swapping the adapter (see
``MockAdapter``) is how the build tool is skipped in tests and in
``--mock`` runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from civicrm_provisioner.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    working_dir: str = "."


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They never raise: failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g. 'shell', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be used.  Fast, never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt.  Never raises."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
