"""Exception types raised by the hardware-support components."""

from __future__ import annotations

from enum import IntEnum


class BrakeTestErrorCode(IntEnum):
    """Error values reported together with a failed brake test."""

    FAILURE = 1


class BrakeTestExecutorException(RuntimeError):
    """Raised when a brake test cannot be executed."""


class BrakeTestUtilsException(RuntimeError):
    """Raised by the brake test helper functions."""


class GetCurrentJointStatesException(BrakeTestUtilsException):
    """Raised when the current joint states cannot be obtained."""


class CANOpenBrakeTestAdapterException(RuntimeError):
    """Raised by the CANopen brake test adapter; carries an error value."""

    def __init__(self, message: str, error_value: int = BrakeTestErrorCode.FAILURE) -> None:
        super().__init__(message)
        self.error_value = error_value


class ModbusMsgWrapperException(RuntimeError):
    """Raised when a Modbus message lacks information needed to interpret it."""


class ModbusMsgOperationModeWrapperException(ModbusMsgWrapperException):
    """Raised when a Modbus message lacks the operation mode register."""


class ModbusMsgBrakeTestWrapperException(ModbusMsgWrapperException):
    """Raised when a Modbus message lacks the brake test register."""


class PilzModbusClientException(RuntimeError):
    """Raised by the Modbus client."""