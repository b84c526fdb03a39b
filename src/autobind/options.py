"""Bundled configuration binder.

Opt in by registering it::

    import autobind
    from autobind import options

    autobind.binders.register(options.configure)

Afterwards every ``@configuration("Key")`` class is built from that section and
registered as a singleton instance.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar, get_type_hints


if TYPE_CHECKING:
    from ._collection import ServiceCollection

T = TypeVar("T")

logger = logging.getLogger(__name__)


def configure(target: type[T], services: ServiceCollection, section: Mapping[str, Any]) -> T:
    """Build ``target`` from ``section`` and register it with ``services``."""
    instance = build(target, section)
    services.add_instance(target, instance)
    return instance


def build(target: type[T], section: Mapping[str, Any]) -> T:
    """Populate a new ``target`` from the matching keys of ``section``.

    Dataclasses get their fields as constructor arguments; other classes are
    created without arguments and have their annotated attributes set. Keys
    are matched case-insensitively and unknown keys are ignored. A nested
    section is built into the attribute's own options type.
    """
    values = {key.casefold(): value for key, value in section.items() if isinstance(key, str)}
    hints = _type_hints(target)

    if dataclasses.is_dataclass(target):
        kwargs = {
            f.name: _bind_value(hints.get(f.name), values[f.name.casefold()])
            for f in dataclasses.fields(target)
            if f.init and f.name.casefold() in values
        }
        return target(**kwargs)

    instance = target()
    for name, hint in hints.items():
        if not name.startswith("_") and name.casefold() in values:
            setattr(instance, name, _bind_value(hint, values[name.casefold()]))
    return instance


def _bind_value(hint: Any, value: Any) -> Any:
    if not isinstance(value, Mapping) or not inspect.isclass(hint):
        return value
    if issubclass(hint, Mapping):
        return value
    if dataclasses.is_dataclass(hint) or _type_hints(hint):
        return build(hint, value)
    return value


def _type_hints(target: type) -> dict[str, Any]:
    try:
        return get_type_hints(target)
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s type hints", exc.name, target.__qualname__)
        hints: dict[str, Any] = {}
        for klass in reversed(target.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints
