"""Controller authorization for configuration changes.

Exactly one identity controls fee parameters at any time. Control can be
handed over by the current controller.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog

from settlement.errors import NotController, ZeroAddress
from settlement.journal import Journal
from settlement.models.events import ControllerTransferred
from settlement.models.types import derive_address, is_null_address, normalize_address

logger = structlog.get_logger()


@runtime_checkable
class Controller(Protocol):
    """Single-identity authorization check."""

    def is_controller(self, caller: str) -> bool: ...


class SingleController:
    """Holds the one identity allowed to change configuration."""

    def __init__(self, journal: Journal, controller: str) -> None:
        if is_null_address(controller):
            raise ZeroAddress("Controller cannot be the null address")
        self._journal = journal
        self._controller = normalize_address(controller)
        self.address = derive_address("settlement.governance", self._controller)

    @property
    def controller(self) -> str:
        return self._controller

    def is_controller(self, caller: str) -> bool:
        return normalize_address(caller) == self._controller

    def transfer_control(self, caller: str, new_controller: str) -> None:
        """Hand control to a new identity.

        Raises:
            NotController: If caller is not the current controller
            ZeroAddress: If new_controller is the null address
        """
        require_controller(self, caller)
        if is_null_address(new_controller):
            raise ZeroAddress("Controller cannot be the null address")

        with self._journal.atomic():
            old = self._controller
            self._controller = normalize_address(new_controller)
            self._journal.record(lambda: setattr(self, "_controller", old))
            self._journal.emit(
                ControllerTransferred(contract=self.address, old=old, new=self._controller)
            )
        logger.info("controller_transferred", old=old, new=self._controller)


def require_controller(controller: Controller, caller: str) -> None:
    """Raise NotController unless caller is the controller."""
    if not controller.is_controller(caller):
        raise NotController(f"{caller} is not the controller")
