from __future__ import annotations

from enum import Enum

from .exceptions import InvalidConfigValueError


class _ClosedEnum(str, Enum):
    """Закрытое перечисление: строка из конфига -> вариант, без дефолтов."""

    @classmethod
    def _label(cls) -> str:
        return cls.__name__

    @classmethod
    def from_string(cls, value: str | None):
        # exact match on the member name, case-insensitive, no trimming
        if isinstance(value, str):
            for member in cls:
                if member.name.casefold() == value.casefold():
                    return member

        valid = ",".join(m.name for m in cls)
        raise InvalidConfigValueError(
            f"{cls._label()} ({value!r}) does not match the valid types: {valid}"
        )


class ProcessorType(_ClosedEnum):
    # Pentaho Kettle transformation (.ktr) or job (.kjb)
    KETTLE = "KETTLE"

    @classmethod
    def _label(cls) -> str:
        return "processor type"


class OutputType(_ClosedEnum):
    # copy into persistent storage (tables must already exist)
    STORAGE = "STORAGE"
    # copy into a CSV file in the output location
    CSV = "CSV"

    @classmethod
    def _label(cls) -> str:
        return "output type"


class InputCategory(_ClosedEnum):
    """Категории входных данных. Порядок членов = порядок загрузки."""

    PERSONAL = "PERSONAL"
    COURSE = "COURSE"
    ENROLLMENT = "ENROLLMENT"
    GRADE = "GRADE"
    ACTIVITY = "ACTIVITY"

    @classmethod
    def _label(cls) -> str:
        return "input category"

    @property
    def filename(self) -> str:
        return f"{self.value.lower()}.csv"
