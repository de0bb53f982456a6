"""Runtime scope frames linked into a lexical chain."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import LoxError, LoxRuntimeError
from .token import Token


#one frame of variables plus a link to the frame that encloses it
@dataclass(eq=False, slots=True)
class Environment:
    enclosing: Optional["Environment"] = None
    values: Dict[str, Any] = field(default_factory=dict)

    #redefining an existing name in the same frame simply overwrites it
    def define(self, name: str, value: Any) -> None:
        self.values[name] = value

    def get(self, name: Token) -> Any:
        environment: Optional[Environment] = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any) -> None:
        environment: Optional[Environment] = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    #walks exactly `distance` links outward
    def ancestor(self, distance: int) -> "Environment":
        environment = self
        for _ in range(distance):
            if environment.enclosing is None:
                raise LoxError(f"scope distance {distance} exceeds the environment chain")
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: Token) -> Any:
        frame = self.ancestor(distance)
        if name.lexeme not in frame.values:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
        return frame.values[name.lexeme]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        self.ancestor(distance).values[name.lexeme] = value
