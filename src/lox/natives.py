"""Host functions pre-registered in every interpreter's global frame."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List

from .runtime import NativeFunction, is_equal, stringify

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .interpreter import Interpreter


#one outcome of the `assert` native, kept for the embedding host to inspect
@dataclass(frozen=True, slots=True)
class AssertionRecord:
    message: str
    expected: Any
    actual: Any
    passed: bool

    def __str__(self) -> str:
        status = "ok" if self.passed else "FAILED"
        return f"{status}: {self.message} -- expected {stringify(self.expected)}, got {stringify(self.actual)}"


#builds the native callables bound to a single interpreter session
def install(interpreter: "Interpreter") -> None:
    def clock(arguments: List[Any]) -> float:
        return (time.perf_counter() - interpreter.started_at) * 1000.0

    def assert_(arguments: List[Any]) -> None:
        message, expected, actual = arguments
        record = AssertionRecord(
            message=stringify(message),
            expected=expected,
            actual=actual,
            passed=is_equal(expected, actual),
        )
        interpreter.assertions.append(record)
        return None

    def stringify_(arguments: List[Any]) -> str:
        return stringify(arguments[0])

    interpreter.globals.define("clock", NativeFunction("clock", 0, clock))
    interpreter.globals.define("assert", NativeFunction("assert", 3, assert_))
    interpreter.globals.define("stringify", NativeFunction("stringify", 1, stringify_))


__all__ = ["AssertionRecord", "install"]
