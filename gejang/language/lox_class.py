from typing import Dict, Optional

from gejang.language.lox_callable import LoxCallable, LoxFunction
from gejang.language.lox_types import LoxObject


class LoxClass(LoxCallable):
    kind = "Class"

    def __init__(self, name: str, methods: Dict[str, LoxFunction]) -> None:
        self.name = name
        self.methods = methods

    @property
    def initializer(self) -> Optional[LoxFunction]:
        return self.methods.get("init")

    @property
    def arity(self) -> int:  # type: ignore[override]
        if (initializer := self.initializer) is not None:
            return initializer.arity
        return 0

    def __str__(self) -> str:
        return f"<cls {self.name}>"


class LoxInstance:
    """An object. Its fields start out as its class's methods and are mutated
    independently of the class and of every other instance."""
    kind = "Instance"

    def __init__(self, lox_class: LoxClass) -> None:
        self.lox_class = lox_class
        self.fields: Dict[str, LoxObject] = dict(lox_class.methods)

    def get(self, name: str) -> LoxObject:
        """Look a field up, binding it to this instance if it is a method.

        Raises `KeyError` if there is no such field."""
        value = self.fields[name]
        if isinstance(value, LoxFunction) and value.is_unbound_method:
            return value.bind_to_instance(self)
        return value

    def set(self, name: str, value: LoxObject) -> None:
        self.fields[name] = value

    def __str__(self) -> str:
        return f"<instance of {self.lox_class.name}>"
