from __future__ import annotations

import inspect
import typing
from typing import Protocol, cast


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        """Detect whether 'tp' is a typing.Protocol class (not a class implementing one)."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False)) and tp is not cast("type", Protocol)
