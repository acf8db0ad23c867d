import pytest

from prbtkit.exceptions import (
    BrakeTestErrorCode,
    BrakeTestExecutorException,
    BrakeTestUtilsException,
    CANOpenBrakeTestAdapterException,
    GetCurrentJointStatesException,
    ModbusMsgBrakeTestWrapperException,
    ModbusMsgOperationModeWrapperException,
    ModbusMsgWrapperException,
    PilzModbusClientException,
)


@pytest.mark.parametrize(
    "exc_type",
    [
        BrakeTestExecutorException,
        BrakeTestUtilsException,
        GetCurrentJointStatesException,
        ModbusMsgWrapperException,
        ModbusMsgOperationModeWrapperException,
        ModbusMsgBrakeTestWrapperException,
        PilzModbusClientException,
        CANOpenBrakeTestAdapterException,
    ],
)
def test_message_is_kept(exc_type):
    ex = exc_type("Test msg")
    assert str(ex) == "Test msg"
    assert ex.args[0] == "Test msg"
    assert RuntimeError in type(ex).__mro__


def test_joint_states_exception_is_utils_exception():
    ex = GetCurrentJointStatesException("Test msg")
    mro = type(ex).__mro__
    assert mro.index(BrakeTestUtilsException) == 1
    assert str(ex) == "Test msg"


@pytest.mark.parametrize(
    "exc_type", [ModbusMsgOperationModeWrapperException, ModbusMsgBrakeTestWrapperException]
)
def test_wrapper_exceptions_share_base(exc_type):
    with pytest.raises(ModbusMsgWrapperException) as info:
        raise exc_type("Test message")
    assert type(info.value) is exc_type
    assert str(info.value) == "Test message"


def test_canopen_default_error_value_is_failure():
    ex = CANOpenBrakeTestAdapterException("broken")
    assert ex.error_value == BrakeTestErrorCode.FAILURE


def test_canopen_custom_error_value_is_kept():
    ex = CANOpenBrakeTestAdapterException("broken", error_value=42)
    assert ex.error_value == 42
    assert str(ex) == "broken"