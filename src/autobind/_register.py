from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._binder import default_resolver
from ._errors import MissingConfigurationSource
from ._markers import ConfigurationMarker, Lifetime, LifetimeMarker
from ._scanner import scan_types


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._binder import BinderResolver
    from ._protocols import ConfigurationSource, ServiceContainer
    from ._scanner import CandidateClass, Source

    Marker = LifetimeMarker | ConfigurationMarker


logger = logging.getLogger(__name__)


def register_annotated_types(
    services: ServiceContainer | None,
    configuration: ConfigurationSource | None = None,
    *,
    sources: Iterable[Source] | None = None,
    resolver: BinderResolver | None = None,
) -> int:
    """Register every class decorated with @transient, @scoped, @singleton or @configuration.

    Example:
      services = ServiceCollection()
      register_annotated_types(services, Configuration(settings), sources=["myapp"])

    - `sources`: modules, module names or classes to scan; defaults to every
      module already imported.
    - `configuration` is only needed when a scanned class uses @configuration.
    - `resolver` finds the configuration binder; defaults to the process-wide one.

    Returns the number of classes registered. The first error aborts the call.
    """
    if services is None:
        return 0

    candidates = scan_types(sources)

    registered = 0
    for candidate in candidates:
        if dispatch(candidate, services, configuration, resolver=resolver):
            registered += 1

    logger.info("Registered %d of %d scanned classes", registered, len(candidates))
    return registered


def select_first_recognized(markers: Iterable[object]) -> Marker | None:
    """First lifetime or configuration marker in declaration order.

    Later markers, recognized or not, are ignored: a class decorated with both
    @singleton() and @transient() is registered once, as whichever is written first.
    """
    for marker in markers:
        if isinstance(marker, (LifetimeMarker, ConfigurationMarker)):
            return marker
    return None


def dispatch(
    candidate: CandidateClass,
    services: ServiceContainer,
    configuration: ConfigurationSource | None = None,
    *,
    resolver: BinderResolver | None = None,
) -> bool:
    """Register one candidate according to its first recognized marker.

    Returns False when the class carries no recognized marker, or only a
    @configuration() marker without a key.
    """
    marker = select_first_recognized(candidate.markers)
    if marker is None:
        return False

    if isinstance(marker, LifetimeMarker):
        _REGISTRARS[marker.lifetime](services, candidate.type, marker)
        return True

    if configuration is None:
        raise MissingConfigurationSource(candidate.type)

    return register_configuration(services, configuration, candidate.type, marker, resolver=resolver)


def register_transient(services: ServiceContainer, cls: type, marker: LifetimeMarker) -> None:
    _check_lifetime(marker, Lifetime.TRANSIENT)
    services.add_transient(cls, marker.service_type)
    _log_registration(cls, marker)


def register_scoped(services: ServiceContainer, cls: type, marker: LifetimeMarker) -> None:
    _check_lifetime(marker, Lifetime.SCOPED)
    services.add_scoped(cls, marker.service_type)
    _log_registration(cls, marker)


def register_singleton(services: ServiceContainer, cls: type, marker: LifetimeMarker) -> None:
    _check_lifetime(marker, Lifetime.SINGLETON)
    services.add_singleton(cls, marker.service_type)
    _log_registration(cls, marker)


def register_configuration(
    services: ServiceContainer,
    configuration: ConfigurationSource,
    cls: type,
    marker: ConfigurationMarker,
    *,
    resolver: BinderResolver | None = None,
) -> bool:
    key = marker.key
    if key is None:
        # @configuration() without a key registers nothing
        logger.debug("Ignoring @configuration() without a key on %s", cls.__qualname__)
        return False

    (resolver or default_resolver).bind(cls, key, services, configuration)
    return True


def _check_lifetime(marker: LifetimeMarker, expected: Lifetime) -> None:
    if marker.lifetime is not expected:
        msg = f"Expected a {expected.value} marker, got {marker.lifetime.value}"
        raise ValueError(msg)


def _log_registration(cls: type, marker: LifetimeMarker) -> None:
    service_type = marker.service_type or cls
    logger.debug("Registered %s as %s (%s)", cls.__qualname__, service_type.__qualname__, marker.lifetime.value)


_REGISTRARS: dict[Lifetime, Callable[[ServiceContainer, type, LifetimeMarker], None]] = {
    Lifetime.TRANSIENT: register_transient,
    Lifetime.SCOPED: register_scoped,
    Lifetime.SINGLETON: register_singleton,
}
