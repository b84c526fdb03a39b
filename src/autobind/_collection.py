from __future__ import annotations

import inspect
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, get_type_hints

from ._compat import is_protocol
from ._markers import Lifetime


if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class ServiceDescriptor:
    service_type: type
    implementation: type | None
    lifetime: Lifetime
    instance: object | None = None


class ServiceCollection:
    """Ordered record of service registrations.

    - add_transient / add_scoped / add_singleton register an implementation type,
      optionally against a distinct service type
    - add_instance registers a pre-built singleton
    - later registrations for the same service type win in `get`.

    Nothing is constructed here; resolving services is the job of whatever
    container is built from these descriptors.
    """

    def __init__(self) -> None:
        self._descriptors: list[ServiceDescriptor] = []
        self._lock = threading.RLock()

    def add_transient(self, implementation: type, service_type: type | None = None) -> ServiceDescriptor:
        return self._add(implementation, service_type, Lifetime.TRANSIENT)

    def add_scoped(self, implementation: type, service_type: type | None = None) -> ServiceDescriptor:
        return self._add(implementation, service_type, Lifetime.SCOPED)

    def add_singleton(self, implementation: type, service_type: type | None = None) -> ServiceDescriptor:
        return self._add(implementation, service_type, Lifetime.SINGLETON)

    def add_instance(self, service_type: type, instance: object) -> ServiceDescriptor:
        """Register a pre-built instance (always singleton)."""
        _validate_impl(cls=service_type, impl=type(instance))
        descriptor = ServiceDescriptor(
            service_type=service_type,
            implementation=None,
            lifetime=Lifetime.SINGLETON,
            instance=instance,
        )
        with self._lock:
            self._descriptors.append(descriptor)
        return descriptor

    def get(self, service_type: type) -> ServiceDescriptor | None:
        with self._lock:
            for descriptor in reversed(self._descriptors):
                if descriptor.service_type is service_type:
                    return descriptor
        return None

    def _add(self, implementation: type, service_type: type | None, lifetime: Lifetime) -> ServiceDescriptor:
        if not inspect.isclass(implementation):
            msg = f"Implementation must be a class, got {implementation!r}"
            raise TypeError(msg)

        if service_type is None:
            service_type = implementation
        else:
            _validate_impl(cls=service_type, impl=implementation)

        descriptor = ServiceDescriptor(service_type=service_type, implementation=implementation, lifetime=lifetime)
        with self._lock:
            self._descriptors.append(descriptor)
        return descriptor

    def __iter__(self) -> Iterator[ServiceDescriptor]:
        with self._lock:
            return iter(list(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, service_type: object) -> bool:
        with self._lock:
            return any(d.service_type is service_type for d in self._descriptors)


def _validate_impl(cls: type, impl: type) -> None:
    """Validate that 'impl' implements 'cls'.

    - For normal classes/ABCs: require issubclass(impl, cls).
    - For Protocols: nominal via MRO, otherwise structural conformance.
    """
    if not inspect.isclass(cls):
        msg = f"Service type must be a class, got {cls!r}"
        raise TypeError(msg)

    if not is_protocol(cls):
        if not issubclass(impl, cls):
            msg = f"Implementation {impl.__name__} must be a subclass of {cls.__name__}"
            raise TypeError(msg)
        return

    if cls in getattr(impl, "__mro__", ()):
        return

    _validate_protocol_structural_conformance(cls, impl)


def _validate_protocol_structural_conformance(proto_cls: type, impl: type) -> None:
    """Best-effort structural conformance: member presence + required positional arity."""
    missing: list[str] = []
    signature_mismatches: list[str] = []

    try:
        proto_hints = get_type_hints(proto_cls)
    except (TypeError, NameError):
        proto_hints = {}

    for name in proto_hints:
        if not name.startswith("_") and not hasattr(impl, name):
            missing.append(name)

    for name, proto_attr in proto_cls.__dict__.items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        impl_attr = getattr(impl, name, None)
        if impl_attr is None:
            missing.append(name)
            continue

        if not callable(impl_attr):
            signature_mismatches.append(f"{name}: not callable on {impl.__name__}")
            continue

        try:
            proto_arity = _positional_arity(inspect.signature(proto_attr))
            impl_arity = _positional_arity(inspect.signature(impl_attr))
        except (TypeError, ValueError) as e:
            signature_mismatches.append(f"{name}: unable to compare signatures ({e})")
            continue

        if impl_arity < proto_arity:
            signature_mismatches.append(
                f"{name}: impl has fewer required positional params ({impl_arity}) than protocol ({proto_arity})"
            )

    if missing or signature_mismatches:
        msgs = []
        if missing:
            msgs.append(f"missing members: {', '.join(missing)}")
        if signature_mismatches:
            msgs.append(f"signature mismatches: {', '.join(signature_mismatches)}")

        msg = (
            f"Implementation {impl.__name__} does not structurally conform to protocol "
            f"{proto_cls.__name__}: {'; '.join(msgs)}"
        )
        raise TypeError(msg)


def _positional_arity(sig: inspect.Signature) -> int:
    return sum(
        1
        for p in sig.parameters.values()
        if p.name != "self"
        and p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )

