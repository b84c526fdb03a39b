from enum import Enum
from typing import Protocol

from autobind import configuration, scoped, singleton, transient


class Clock(Protocol):
    def now(self) -> float: ...


@singleton(Clock)
class SystemClock:
    def now(self) -> float:
        return 0.0


@scoped()
class UnitOfWork: ...


@transient()
class ReportBuilder:
    @singleton()
    class Formatter: ...


@configuration("Reports")
class ReportOptions:
    title: str = "untitled"
    pages: int = 1


class Undecorated: ...


@singleton()
class _PrivateService: ...


@singleton()
class Color(Enum):
    RED = 1


def make_local():
    @singleton()
    class Local: ...

    return Local
