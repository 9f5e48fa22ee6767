"""Error codes and the operation result type.

The numeric codes are fixed for wire compatibility. Several conditions share
a code; the enum exposes both names as aliases of one member.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class ErrorCode(IntEnum):
    NOT_OWNER = 100
    BET_NOT_FOUND = 101
    RACE_NOT_FOUND = 102
    RACE_ENDED = 103
    RACE_NOT_RUNNING = 104
    RACE_NOT_ENDED = 104
    INSUFFICIENT_FUNDS = 105
    UNAUTHORIZED = 106
    INVALID_AMOUNT = 107
    INVALID_BET = 107
    RACE_ALREADY_STARTED = 108
    INVALID_RACER_SET = 110
    INVALID_RACER = 110
    ALREADY_CLAIMED = 111


class EngineError(Exception):
    """A rejected operation. Carries the code reported to the caller."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = ErrorCode(code)
        self.message = message or self.code.name
        super().__init__(f"{int(self.code)} {self.message}")


@dataclass(frozen=True)
class Result:
    """Outcome of one operation: a value on success, an error code on failure.

    Example:
        >>> Result.ok(1000).to_dict()
        {'isOk': True, 'value': 1000}
        >>> Result.err(ErrorCode.INSUFFICIENT_FUNDS).to_dict()
        {'isOk': False, 'error': 105}
    """
    is_ok: bool
    value: Any = None
    error: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, value: Any = True) -> "Result":
        return cls(is_ok=True, value=value)

    @classmethod
    def err(cls, code: ErrorCode) -> "Result":
        return cls(is_ok=False, error=ErrorCode(code))

    def unwrap(self) -> Any:
        """Return the value, raising EngineError for a failed result."""
        if not self.is_ok:
            raise EngineError(self.error)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        if self.is_ok:
            return {'isOk': True, 'value': self.value}
        return {'isOk': False, 'error': int(self.error)}
