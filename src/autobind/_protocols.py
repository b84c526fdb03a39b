from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ServiceContainer(Protocol):
    """What the registrars call into. ``service_type=None`` registers the implementation against itself."""

    def add_transient(self, implementation: type, service_type: type | None = None) -> Any: ...

    def add_scoped(self, implementation: type, service_type: type | None = None) -> Any: ...

    def add_singleton(self, implementation: type, service_type: type | None = None) -> Any: ...


@runtime_checkable
class ConfigurationSource(Protocol):
    def get_section(self, key: str) -> Any: ...
