"""
Namespace configuration helpers.

default_constant() lets shared code declare a default that users can override
by defining the name *before* that code runs:

    default_constant(my_plugin, "PER_PAGE", 20)

config() keeps a per-namespace CONFIG dictionary where the first value
written for a key wins, unless the write is forced:

    config(my_module, "param_one", "some value")
    config(my_module, "param_one", "another value")          # ignored
    config(my_module, "param_two", 98765, force=True)       # overrides
    config(my_module, "param_one")                           # -> "some value"
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Mapping
from typing import Any

CONSTANT_NAME = re.compile(r"^[A-Z][A-Za-z0-9_]*$")


class ConfigDict(dict):
    """A dict whose values can only be replaced by a forced write."""

    def set(self, name: Hashable, value: Any, force: bool = False) -> Any:
        if force or self.get(name) is None:
            self[name] = value
        return self[name]

    def fetch(self, name: Hashable | list) -> Any:
        if isinstance(name, list):
            return [self.get(n) for n in name]
        return self.get(name)


def default_constant(namespace: Any, name: str, value: Any) -> Any:
    """Define `namespace.<name> = value` unless the name is already defined."""
    if not isinstance(name, str):
        raise TypeError(f"Cannot use a {type(name).__name__} ['{name}'] object as a constant name")
    if not CONSTANT_NAME.match(name):
        raise NameError(f"wrong constant name {name}")
    if not hasattr(namespace, name):
        setattr(namespace, name, value)
    return getattr(namespace, name)


def namespace_config(namespace: Any) -> ConfigDict:
    """The CONFIG dictionary of a namespace, created on first use."""
    existing = getattr(namespace, "CONFIG", None)
    if not isinstance(existing, ConfigDict):
        existing = ConfigDict(existing or {})
        setattr(namespace, "CONFIG", existing)
    return existing


def config(namespace: Any, *args: Any, force: bool = False, **values: Any) -> Any:
    """
    Read or write configuration of a namespace.

    Forms:
        config(ns, name)                 -> value (None if unset)
        config(ns, [name, name])         -> list of values
        config(ns, name, value)          -> sets if unset, returns current value
        config(ns, name, value, True)    -> always sets
        config(ns, {name: value, ...})   -> sets several (never forced)
        config(ns, name=value, ...)      -> same as the mapping form
    """
    if not args and not values:
        raise ValueError("config expects at least one argument")

    store = namespace_config(namespace)

    if values or (args and isinstance(args[0], Mapping)):
        mapping = dict(args[0]) if args else {}
        mapping.update(values)
        for key, value in mapping.items():
            store.set(key, value)
        return store

    name = args[0]
    value = args[1] if len(args) > 1 else None
    if len(args) > 2:
        force = force or bool(args[2])
    if value is None:
        return store.fetch(name)
    return store.set(name, value, force=force)
