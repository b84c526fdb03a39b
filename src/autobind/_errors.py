from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class AutobindError(RuntimeError):
    pass


class MissingConfigurationSource(AutobindError, ValueError):
    """A class carries a configuration marker but no configuration source was given."""

    def __init__(self, cls: type) -> None:
        self.cls = cls
        msg = (
            f"{_qualified_name(cls)} is decorated with @configuration but "
            "register_annotated_types was called without a configuration source."
        )
        super().__init__(msg)


class BinderNotFound(AutobindError):
    def __init__(self) -> None:
        msg = "Unable to find a configure(target, services, section) binder"
        super().__init__(msg)


class AmbiguousBinder(AutobindError):
    def __init__(self, candidates: Iterable[str]) -> None:
        self.candidates = tuple(sorted(candidates))
        msg = f"Found more than one configure binder: {', '.join(self.candidates)}"
        super().__init__(msg)


class BinderInvocationFailure(AutobindError):
    def __init__(self, cls: type, key: str) -> None:
        self.cls = cls
        self.key = key
        msg = f"Unable to configure the class {_qualified_name(cls)} with the key {key!r}"
        super().__init__(msg)
