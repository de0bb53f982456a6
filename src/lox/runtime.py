"""Runtime values: callables, classes and instances."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from . import ast
from .environment import Environment
from .errors import LoxRuntimeError
from .token import Token

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .interpreter import Interpreter


#unwinds from a `return` statement to the innermost call boundary
class ReturnSignal(Exception):
    """Not a LoxError: only LoxFunction.call is allowed to catch it."""

    def __init__(self, value: Any) -> None:
        super().__init__("return")
        self.value = value


#anything that can appear before `(...)` in a call expression
class LoxCallable(ABC):
    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        ...


#host-supplied function registered in the global frame
class NativeFunction(LoxCallable):
    def __init__(self, name: str, arity: int, function: Callable[[List[Any]], Any]) -> None:
        self.name = name
        self._arity = arity
        self._function = function

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        return self._function(arguments)

    def __str__(self) -> str:
        return "<native fn>"


#user function paired with the frame that was active where it was declared
class LoxFunction(LoxCallable):
    def __init__(self, declaration: ast.Function, closure: Environment, is_initializer: bool = False) -> None:
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        environment = Environment(enclosing=self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        try:
            interpreter.execute_block(self.declaration.body, environment)
        except ReturnSignal as signal:
            if not self.is_initializer:
                return signal.value
        if self.is_initializer:
            return self.closure.values["this"]
        return None

    #inserts a frame holding `this` between the closure and the parameter frame
    def bind(self, instance: "LoxInstance") -> "BoundMethod":
        environment = Environment(enclosing=self.closure)
        environment.define("this", instance)
        return BoundMethod(self.declaration, environment, self.is_initializer, receiver=instance)

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"


#a method already attached to its receiving instance; two reads of one method on one instance compare equal
class BoundMethod(LoxFunction):
    def __init__(
        self,
        declaration: ast.Function,
        closure: Environment,
        is_initializer: bool,
        receiver: "LoxInstance",
    ) -> None:
        super().__init__(declaration, closure, is_initializer)
        self.receiver = receiver

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundMethod):
            return NotImplemented
        return self.declaration is other.declaration and self.receiver is other.receiver

    def __hash__(self) -> int:
        return hash((id(self.declaration), id(self.receiver)))


#calling a class creates an instance and runs `init` on it when present
class LoxClass(LoxCallable):
    def __init__(self, name: str, methods: Dict[str, LoxFunction]) -> None:
        self.name = name
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        return self.methods.get(name)

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        instance = LoxInstance(klass=self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


#fields are created on first assignment; methods come from the class
@dataclass(eq=False, slots=True)
class LoxInstance:
    klass: LoxClass
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"<{self.klass.name} instance>"


#nil and false are falsey; every other value, including 0 and "", is truthy
def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


#values are equal only when they share a runtime kind; True never equals 1.0
def is_equal(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if type(left) is not type(right):
        return False
    return left == right


#host rendering shared by `print` and the `stringify` native
def stringify(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)
