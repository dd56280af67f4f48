"""
Module contexts: enumerable, lazily loaded groups of component modules.

A context exposes every module key it knows about and loads a module by
key on demand.  The catalog builder only depends on this small interface,
so any host can supply its own (a package on disk, an in-memory mapping,
a plugin registry ...).

Keys look like relative paths (``./buttons/button.py``); the part of the
last path segment before its final dot is the module's *file stem*, which
is what ties test modules to their component definitions.
"""

from __future__ import annotations

import importlib.util
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Mapping


RESERVED_MARKER = "__"


class ModuleContext(ABC):
    """Enumerable key → module lookup."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every module key, in a stable order."""

    @abstractmethod
    def load(self, key: str) -> Any:
        """Load and return the module for *key*.  May raise anything."""

    def __call__(self, key: str) -> Any:
        return self.load(key)


class MappingContext(ModuleContext):
    """Context backed by a mapping of key → module.

    Values wrapped in ``Loader`` are called on every ``load``; whatever
    they raise propagates to the caller.
    """

    def __init__(self, modules: Mapping[str, Any]):
        self._modules = dict(modules)

    def keys(self) -> list[str]:
        return list(self._modules)

    def load(self, key: str) -> Any:
        value = self._modules[key]
        if isinstance(value, Loader):
            return value()
        return value


class Loader:
    """Deferred module factory for ``MappingContext``."""

    def __init__(self, factory: Callable[[], Any]):
        self._factory = factory

    def __call__(self) -> Any:
        return self._factory()


class DirectoryContext(ModuleContext):
    """Every ``*.py`` file below a directory, imported on first load.

    Modules are executed under a private name (``styleguide_ctx.<hash>.<token>``)
    so component files do not need to live in an importable package.  While a
    file runs, its own directory is importable, so a test module can do
    ``from button import render``; sibling modules imported that way are
    dropped from ``sys.modules`` afterwards and re-read on the next load.
    Loaded modules are cached per context.
    """

    def __init__(self, root: str | Path, pattern: str = "*.py"):
        self.root = Path(root).resolve()
        self.pattern = pattern
        self._cache: dict[str, ModuleType] = {}

    def keys(self) -> list[str]:
        if not self.root.is_dir():
            return []
        keys = []
        for path in sorted(self.root.rglob(self.pattern)):
            if path.name == "__init__.py" or "__pycache__" in path.parts:
                continue
            keys.append("./" + path.relative_to(self.root).as_posix())
        return keys

    def load(self, key: str) -> ModuleType:
        if key in self._cache:
            return self._cache[key]

        path = self.root / key.removeprefix("./")
        if not path.is_file():
            raise FileNotFoundError(f"No module '{key}' in {self.root}")

        name = f"styleguide_ctx.{abs(hash(self.root)):x}.{_module_token(key)}"
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import {path}")
        module = importlib.util.module_from_spec(spec)

        search_dir = str(path.parent)
        before = set(sys.modules)
        sys.modules[name] = module
        sys.path.insert(0, search_dir)
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        finally:
            sys.path.remove(search_dir)
            self._forget_siblings(keep=before | {name})
        self._cache[key] = module
        return module

    def _forget_siblings(self, keep: set[str]) -> None:
        for mod_name in set(sys.modules) - keep:
            file = getattr(sys.modules[mod_name], "__file__", None)
            if file and Path(file).resolve().is_relative_to(self.root):
                del sys.modules[mod_name]

    def __repr__(self) -> str:
        return f"DirectoryContext({str(self.root)!r})"


def _module_token(key: str) -> str:
    """Identifier-safe and unique per key (``./a_b.py`` and ``./a/b.py`` differ)."""
    stem = key.removeprefix("./").rsplit(".", 1)[0]
    safe = "".join(c if c.isalnum() else "_" for c in stem)
    return f"{safe}_{abs(hash(key)):x}"


# ── Helpers ────────────────────────────────────────────────────────

def file_stem(key: str) -> str:
    """``./forms/input.test.py`` → ``input.test``"""
    file = key.split("/")[-1]
    dot = file.rfind(".")
    return file[:dot] if dot != -1 else ""


def is_reserved(name: str) -> bool:
    return RESERVED_MARKER in name


def module_exports(module: Any) -> dict[str, Any]:
    """Return the non-reserved exports of *module*, in definition order.

    Mappings are taken as-is.  Real modules use ``__all__`` when present,
    otherwise their public callables that were defined in the module itself
    (imports, submodules and plain constants such as ``LABEL = "Go"`` are
    skipped).
    """
    if isinstance(module, Mapping):
        items = dict(module)
    elif isinstance(module, ModuleType):
        names = getattr(module, "__all__", None)
        if names is not None:
            items = {n: getattr(module, n) for n in names}
        else:
            items = {
                n: v for n, v in vars(module).items()
                if not n.startswith("_")
                and callable(v)
                and getattr(v, "__module__", module.__name__) == module.__name__
            }
    else:
        items = dict(vars(module))
    return {n: v for n, v in items.items() if not is_reserved(n)}


def reserved_attr(module: Any, name: str) -> Any | None:
    """Read a reserved field (``__meta__`` ...) from a module or mapping."""
    if isinstance(module, Mapping):
        return module.get(name)
    return getattr(module, name, None)
