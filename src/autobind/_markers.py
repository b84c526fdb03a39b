from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T", bound=type)

MARKERS_ATTR = "__autobind_markers__"


class Lifetime(Enum):
    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"


@dataclass(frozen=True)
class LifetimeMarker:
    lifetime: Lifetime
    args: tuple[Any, ...] = ()

    @property
    def service_type(self) -> type | None:
        return self.args[0] if self.args else None


@dataclass(frozen=True)
class ConfigurationMarker:
    args: tuple[Any, ...] = ()

    @property
    def key(self) -> str | None:
        return self.args[0] if self.args else None


def get_markers(cls: type) -> tuple[object, ...]:
    """Markers declared on ``cls`` itself, topmost decorator first.

    Markers are not inherited: a subclass of a decorated class is not registered
    unless it is decorated too.
    """
    return tuple(cls.__dict__.get(MARKERS_ATTR, ()))


def attach_marker(cls: T, marker: object) -> T:
    """Attach ``marker`` to ``cls`` ahead of the markers already present.

    Decorators run bottom-up, so prepending keeps the list in the order the
    decorators are written.
    """
    if not inspect.isclass(cls):
        msg = f"Markers can only be attached to classes, got {cls!r}"
        raise TypeError(msg)

    setattr(cls, MARKERS_ATTR, (marker, *get_markers(cls)))
    return cls


def _lifetime_decorator(lifetime: Lifetime, service_type: type | None) -> Callable[[T], T]:
    if service_type is not None and not inspect.isclass(service_type):
        msg = f"{lifetime.value} service type must be a class, got {service_type!r}"
        raise TypeError(msg)

    args = () if service_type is None else (service_type,)

    def decorator(cls: T) -> T:
        return attach_marker(cls, LifetimeMarker(lifetime, args))

    return decorator


def transient(service_type: type | None = None) -> Callable[[T], T]:
    """Register the decorated class with a transient lifetime.

    Example:
      @transient(IMailer)
      class SmtpMailer(IMailer): ...

    """
    return _lifetime_decorator(Lifetime.TRANSIENT, service_type)


def scoped(service_type: type | None = None) -> Callable[[T], T]:
    """Register the decorated class with a scoped lifetime."""
    return _lifetime_decorator(Lifetime.SCOPED, service_type)


def singleton(service_type: type | None = None) -> Callable[[T], T]:
    """Register the decorated class as a singleton.

    Pass the service type to register the class against it, usually a Protocol
    or ABC the class implements. Without an argument the class is registered
    against itself.
    """
    return _lifetime_decorator(Lifetime.SINGLETON, service_type)


def configuration(key: str | None = None) -> Callable[[T], T]:
    """Bind the configuration section ``key`` onto the decorated options class.

    Example:
      @configuration("Smtp")
      @dataclass
      class SmtpOptions:
          host: str = "localhost"
          port: int = 25

    """
    if key is not None and not isinstance(key, str):
        msg = f"Configuration key must be a string, got {type(key).__name__}"
        raise TypeError(msg)
    if key is not None and not key.strip():
        msg = "Configuration key must not be empty"
        raise ValueError(msg)

    args = () if key is None else (key,)

    def decorator(cls: T) -> T:
        return attach_marker(cls, ConfigurationMarker(args))

    return decorator
