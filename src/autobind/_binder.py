"""Configuration binder discovery.

A binder is any callable shaped ``configure(target, services, section)``: it reads
``section``, builds a populated ``target`` options object and registers it with
``services``. Binders are supplied from outside this package, either registered
explicitly on a :class:`BinderRegistry` or advertised by an installed
distribution under the ``autobind.binders`` entry-point group.

Exactly one binder must be visible. The resolver refuses to guess between
several, and caches the one it finds for the rest of the process.
"""

from __future__ import annotations

import functools
import inspect
import logging
import threading
from importlib import metadata
from typing import TYPE_CHECKING, Any

from ._errors import AmbiguousBinder, BinderInvocationFailure, BinderNotFound


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._protocols import ConfigurationSource, ServiceContainer

    Binder = Callable[[type, Any, Any], object]


logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "autobind.binders"
BINDER_NAME = "configure"


class BinderRegistry:
    """Binder candidates visible to a :class:`BinderResolver`."""

    def __init__(self, *, entry_points: bool = True, group: str = ENTRY_POINT_GROUP) -> None:
        self._binders: list[tuple[str, Binder]] = []
        self._lock = threading.RLock()
        self._use_entry_points = entry_points
        self._group = group

    def register(self, binder: Binder, *, name: str = BINDER_NAME) -> Binder:
        """Register a binder. Returns it unchanged, so this also works as a decorator."""
        if not callable(binder):
            msg = f"Binder must be callable, got {binder!r}"
            raise TypeError(msg)

        with self._lock:
            self._binders.append((name, binder))
        return binder

    def candidates(self) -> list[tuple[str, Binder]]:
        """All binders named ``configure`` with the right shape, as (display name, binder) pairs."""
        with self._lock:
            named = [(name, _display_name(binder), binder) for name, binder in self._binders]

        if self._use_entry_points:
            # Loading an advertised binder imports its module; failures propagate
            named.extend((ep.name, ep.value, ep.load()) for ep in metadata.entry_points(group=self._group))

        found: list[tuple[str, Binder]] = []
        seen: set[tuple[int, int]] = set()
        for name, display, binder in named:
            if name != BINDER_NAME:
                logger.debug("Skipping binder %s: registered as %r, not %r", display, name, BINDER_NAME)
                continue
            if not _has_binder_shape(binder):
                logger.debug("Skipping binder %s: not callable as %s(target, services, section)", display, BINDER_NAME)
                continue
            identity = _identity(binder)
            if identity in seen:
                continue

            seen.add(identity)
            found.append((display, binder))

        return found


class BinderResolver:
    """Finds the unique binder once, then reuses it for every configuration marker."""

    def __init__(self, registry: BinderRegistry) -> None:
        self._registry = registry
        self._binder: Binder | None = None
        self._lock = threading.Lock()

    @property
    def resolved(self) -> bool:
        return self._binder is not None

    def resolve(self) -> Binder:
        binder = self._binder
        if binder is not None:
            return binder

        with self._lock:
            if self._binder is None:
                self._binder = self._find_unique()
            return self._binder

    def _find_unique(self) -> Binder:
        candidates = self._registry.candidates()

        if not candidates:
            raise BinderNotFound

        if len(candidates) > 1:
            raise AmbiguousBinder(name for name, _ in candidates)

        ((name, binder),) = candidates
        logger.info("Resolved configuration binder %s", name)
        return binder

    def bind(
        self,
        cls: type,
        key: str,
        services: ServiceContainer,
        configuration: ConfigurationSource,
    ) -> None:
        """Bind section ``key`` of ``configuration`` onto ``cls`` and register it with ``services``.

        The binder is resolved before the section is looked up, so a missing or
        ambiguous binder is reported without touching the configuration.
        """
        binder = self.resolve()

        try:
            section = configuration.get_section(key)
            configure = functools.partial(binder, cls)
            configure(services, section)
        except Exception as e:
            raise BinderInvocationFailure(cls, key) from e

        logger.debug("Configured %s from section %r", cls.__qualname__, key)


def _identity(binder: object) -> tuple[int, int]:
    """Bound methods are identified by their function and instance."""
    return id(getattr(binder, "__func__", binder)), id(getattr(binder, "__self__", None))


def _display_name(binder: Callable[..., Any]) -> str:
    module = getattr(binder, "__module__", None) or "?"
    qualname = getattr(binder, "__qualname__", None) or repr(binder)
    return f"{module}:{qualname}"


def _has_binder_shape(binder: object) -> bool:
    """Exactly three required positional parameters and nothing else required."""
    if not callable(binder):
        return False

    try:
        sig = inspect.signature(binder)
    except (TypeError, ValueError):
        return False

    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    required = [
        p
        for p in sig.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if len(required) != 3 or any(p.kind not in positional for p in required):
        return False

    return not any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in sig.parameters.values())


binders = BinderRegistry()
default_resolver = BinderResolver(binders)
