"""Tests for controller authorization."""

import pytest

from settlement.constants import NULL_ADDRESS
from settlement.errors import NotController, ZeroAddress
from settlement.governance import Controller, SingleController, require_controller
from settlement.models.events import ControllerTransferred
from tests.helpers import ALICE, BOB, CONTROLLER


@pytest.fixture
def controller(journal) -> SingleController:
    return SingleController(journal, CONTROLLER)


class TestSingleController:
    def test_is_controller(self, controller):
        assert controller.is_controller(CONTROLLER)
        assert controller.is_controller(CONTROLLER.upper().replace("0X", "0x"))
        assert not controller.is_controller(BOB)
        assert isinstance(controller, Controller)

    def test_null_controller_rejected(self, journal):
        with pytest.raises(ZeroAddress):
            SingleController(journal, NULL_ADDRESS)

    def test_require_controller(self, controller):
        require_controller(controller, CONTROLLER)
        with pytest.raises(NotController):
            require_controller(controller, BOB)

    def test_transfer_control(self, journal, controller):
        controller.transfer_control(CONTROLLER, ALICE)

        assert controller.controller == ALICE
        assert not controller.is_controller(CONTROLLER)
        (event,) = journal.event_log.of_type(ControllerTransferred)
        assert (event.old, event.new) == (CONTROLLER, ALICE)

    def test_transfer_control_requires_controller(self, controller):
        with pytest.raises(NotController):
            controller.transfer_control(BOB, BOB)
        assert controller.controller == CONTROLLER

    def test_transfer_to_null_rejected(self, controller):
        with pytest.raises(ZeroAddress):
            controller.transfer_control(CONTROLLER, NULL_ADDRESS)

    def test_new_controller_governs_registry(self, deployment):
        deployment.controller.transfer_control(CONTROLLER, ALICE)

        deployment.registry.set_fee(ALICE, 10)
        with pytest.raises(NotController):
            deployment.registry.set_fee(CONTROLLER, 20)
        assert deployment.registry.fee_bps == 10
