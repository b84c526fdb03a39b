"""Candidate class discovery.

The scan is driven by an explicit list of sources so callers (and tests) control
exactly which classes are considered. Without sources every module already
imported into the process is scanned.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
import sys
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import TYPE_CHECKING

from ._compat import is_protocol
from ._markers import get_markers


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    Source = ModuleType | str | type


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateClass:
    qualified_name: str
    markers: tuple[object, ...]
    type: type

    @classmethod
    def from_type(cls, tp: type) -> CandidateClass:
        return cls(
            qualified_name=f"{tp.__module__}.{tp.__qualname__}",
            markers=get_markers(tp),
            type=tp,
        )


def scan_types(sources: Iterable[Source] | None = None) -> list[CandidateClass]:
    """Collect candidate classes from ``sources``.

    Sources may be modules, dotted module names (packages are walked) or classes.
    ``None`` scans a snapshot of ``sys.modules``. Import errors propagate.
    """
    if sources is None:
        sources = [m for m in list(sys.modules.values()) if isinstance(m, ModuleType)]

    seen: dict[type, CandidateClass] = {}
    for source in sources:
        for tp in _expand_source(source):
            if tp not in seen:
                seen[tp] = CandidateClass.from_type(tp)

    logger.debug("Scanned %d candidate classes", len(seen))
    return list(seen.values())


def _expand_source(source: Source) -> Iterator[type]:
    if isinstance(source, str):
        for module in _import_package(source):
            yield from _module_classes(module)
    elif isinstance(source, ModuleType):
        yield from _module_classes(source)
    elif inspect.isclass(source):
        if _is_candidate(source):
            yield source
        yield from _nested_classes(source)
    else:
        msg = f"Cannot scan {source!r}: expected a module, a module name or a class"
        raise TypeError(msg)


def _import_package(name: str) -> Iterator[ModuleType]:
    module = importlib.import_module(name)
    yield module

    path = getattr(module, "__path__", None)
    if path is None:
        return

    for info in pkgutil.walk_packages(path, module.__name__ + "."):
        yield importlib.import_module(info.name)


def _module_classes(module: ModuleType) -> Iterator[type]:
    module_name = getattr(module, "__name__", None)
    # vars() rather than getmembers(): module __getattr__ hooks must not fire
    for obj in list(vars(module).values()):
        if not isinstance(obj, type) or obj.__module__ != module_name:
            continue
        if "<" in obj.__qualname__:
            continue
        if _is_candidate(obj):
            yield obj
        yield from _nested_classes(obj)


def _nested_classes(cls: type) -> Iterator[type]:
    for name, obj in list(vars(cls).items()):
        if not isinstance(obj, type) or obj.__qualname__ != f"{cls.__qualname__}.{name}":
            continue
        if _is_candidate(obj):
            yield obj
        yield from _nested_classes(obj)


def _is_candidate(cls: type) -> bool:
    """Concrete plain classes only: no enums, protocols, ABCs, private or generated names."""
    if cls.__name__.startswith(("_", "<")):
        return False
    if issubclass(cls, Enum):
        return False
    if inspect.isabstract(cls):
        return False
    return not is_protocol(cls)

