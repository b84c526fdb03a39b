"""Mapping-backed configuration source.

Section keys are ``:``-separated paths matched case-insensitively, so
``config.get_section("Database:Primary")`` reads
``{"database": {"primary": {...}}}``. A missing section is returned empty
rather than raising, so callers can fall back to defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Iterator

KEY_DELIMITER = ":"

_MISSING = object()


class ConfigurationSection(Mapping[str, Any]):
    def __init__(self, path: str, value: Any = _MISSING) -> None:
        self.path = path
        self._value = value

    @property
    def key(self) -> str:
        return self.path.rsplit(KEY_DELIMITER, 1)[-1]

    @property
    def value(self) -> Any:
        """The scalar value at this path; None for a missing or nested section."""
        if self._value is _MISSING or isinstance(self._value, Mapping):
            return None
        return self._value

    def exists(self) -> bool:
        return self._value is not _MISSING

    def get_section(self, key: str) -> ConfigurationSection:
        value = self._value
        path = self.path
        for part in _split(key):
            path = f"{path}{KEY_DELIMITER}{part}" if path else part
            value = _lookup(value, part)
        return ConfigurationSection(path, value)

    def __getitem__(self, key: str) -> Any:
        value = _lookup(self._value, key)
        if value is _MISSING:
            raise KeyError(key)
        if isinstance(value, Mapping):
            return ConfigurationSection(f"{self.path}{KEY_DELIMITER}{key}" if self.path else key, value)
        return value

    def __iter__(self) -> Iterator[str]:
        if isinstance(self._value, Mapping):
            return iter(self._value)
        return iter(())

    def __len__(self) -> int:
        return len(self._value) if isinstance(self._value, Mapping) else 0

    def __repr__(self) -> str:
        return f"ConfigurationSection({self.path!r}, exists={self.exists()})"


class Configuration(ConfigurationSection):
    """Root of a configuration tree built from a nested mapping (e.g. parsed JSON/TOML)."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        super().__init__("", dict(data or {}))

    def __repr__(self) -> str:
        return f"Configuration({list(self)!r})"


def _split(key: str) -> list[str]:
    parts = [part for part in key.split(KEY_DELIMITER) if part]
    if not parts:
        msg = f"Invalid configuration key {key!r}"
        raise ValueError(msg)
    return parts


def _lookup(value: Any, name: str) -> Any:
    if not isinstance(value, Mapping):
        return _MISSING
    if name in value:
        return value[name]

    folded = name.casefold()
    for key, child in value.items():
        if isinstance(key, str) and key.casefold() == folded:
            return child
    return _MISSING
