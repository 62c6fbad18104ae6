"""The table of declared names, organised as nested scopes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ContextError


class ItemType(Enum):
    """Value types of the language."""

    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"


class ItemKind(Enum):
    """What a declared name stands for."""

    MODULE = "module"
    CONST = "const"
    VAR = "var"
    TYPE = "type"
    FUNCTION = "function"
    PROCEDURE = "procedure"


@dataclass
class Item:
    """A declared name.

    ``value`` holds a constant's value; ``addr`` holds a variable's address
    or the head of its chain of unresolved references.
    """

    name: str
    kind: ItemKind
    type: ItemType | None = None
    value: int | None = None
    addr: int = 0


def module_item(name: str) -> Item:
    return Item(name, ItemKind.MODULE)


def const_item(name: str, type: ItemType, value: int) -> Item:
    return Item(name, ItemKind.CONST, type=type, value=value)


def var_item(name: str, type: ItemType, addr: int) -> Item:
    return Item(name, ItemKind.VAR, type=type, addr=addr)


def type_item(name: str, type: ItemType) -> Item:
    return Item(name, ItemKind.TYPE, type=type)


def function_item(name: str, type: ItemType) -> Item:
    return Item(name, ItemKind.FUNCTION, type=type)


def procedure_item(name: str) -> Item:
    return Item(name, ItemKind.PROCEDURE)


class NameTable:
    """Nested scopes of declared names; the innermost scope is searched first."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Item]] = []

    def open_scope(self) -> None:
        self._scopes.append({})

    def close_scope(self) -> None:
        self._scopes.pop()

    def add(self, item: Item) -> None:
        """Put ``item`` in the innermost scope, replacing any of the same name."""
        self._scopes[-1][item.name] = item

    def declare(self, item: Item) -> None:
        """Add ``item``, refusing a name already declared in the innermost scope."""
        if item.name in self._scopes[-1]:
            raise ContextError("Повторное обьявление имени")
        self.add(item)

    def find(self, name: str) -> Item:
        """Return the innermost declaration of ``name``."""
        for scope in reversed(self._scopes):
            item = scope.get(name)
            if item is not None:
                return item
        raise ContextError("Необъявленное имя")

    def variables(self) -> list[Item]:
        """Variables of the innermost scope, in order of declaration."""
        return [item for item in self._scopes[-1].values() if item.kind is ItemKind.VAR]