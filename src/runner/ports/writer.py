from __future__ import annotations

from typing import Protocol

from src.app.models.pipeline_config import Output


class OutputWriter(Protocol):
    """Writer копирует поля Output из временного хранилища в постоянное или в CSV.

    Для STORAGE: from_ -> to, source -> target.
    Для CSV: from_ -> filename, source -> header, порядок полей = порядок колонок.
    Возвращает число записанных строк.
    """

    async def write(self, output: Output) -> int:
        ...
