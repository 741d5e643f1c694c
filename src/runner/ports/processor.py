from __future__ import annotations

from typing import Protocol

from src.app.models.pipeline_config import Processor


class ProcessorEngine(Protocol):
    """Исполняет внешний шаг (kettle ktr/kjb) над временным хранилищем.

    Результат возвращается не через этот вызов, а через временное хранилище.
    """

    async def run(self, processor: Processor) -> None:
        ...
