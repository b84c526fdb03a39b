"""Declarative service registration.

Classes declare their own dependency-injection lifetime with a decorator, and a
single call registers every decorated class with a service container. Options
classes can likewise declare the configuration section they are bound from.

Exports:
- `transient`, `scoped`, `singleton`: lifetime decorators, optionally taking the
  service type to register the class against.
- `configuration`: binds a configuration section onto the decorated class.
- `register_annotated_types`: scans modules and performs the registrations.
- `ServiceCollection`: a container that records registrations as descriptors.
- `Configuration`: a mapping-backed configuration source.
- `binders`: the process-wide registry of configuration binders.
"""

from ._binder import ENTRY_POINT_GROUP, BinderRegistry, BinderResolver, binders, default_resolver
from ._collection import ServiceCollection, ServiceDescriptor
from ._configuration import Configuration, ConfigurationSection
from ._errors import (
    AmbiguousBinder,
    AutobindError,
    BinderInvocationFailure,
    BinderNotFound,
    MissingConfigurationSource,
)
from ._markers import (
    ConfigurationMarker,
    Lifetime,
    LifetimeMarker,
    configuration,
    get_markers,
    scoped,
    singleton,
    transient,
)
from ._protocols import ConfigurationSource, ServiceContainer
from ._register import dispatch, register_annotated_types, select_first_recognized
from ._scanner import CandidateClass, scan_types


__all__ = [
    "ENTRY_POINT_GROUP",
    "AmbiguousBinder",
    "AutobindError",
    "BinderInvocationFailure",
    "BinderNotFound",
    "BinderRegistry",
    "BinderResolver",
    "CandidateClass",
    "Configuration",
    "ConfigurationMarker",
    "ConfigurationSection",
    "ConfigurationSource",
    "Lifetime",
    "LifetimeMarker",
    "MissingConfigurationSource",
    "ServiceCollection",
    "ServiceContainer",
    "ServiceDescriptor",
    "binders",
    "configuration",
    "default_resolver",
    "dispatch",
    "get_markers",
    "register_annotated_types",
    "scan_types",
    "scoped",
    "select_first_recognized",
    "singleton",
    "transient",
]
