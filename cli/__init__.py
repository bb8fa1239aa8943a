"""CLI package for interacting with the smart temperature logger service."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    # ``cli.app`` resolves to the module, not the Typer instance inside it.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


__all__ = []
