from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.enums import InputCategory
from src.app.models.pipeline_config import PipelineConfig
from src.config import Settings
from src.runner.input.handlers import CsvInputHandler
from src.runner.services.logctx import ctx_prefix

logger = logging.getLogger("lap_loader")

HandlerFactory = Callable[[InputCategory], CsvInputHandler]


def standard_handlers(settings: Settings, session: AsyncSession) -> HandlerFactory:
    def factory(category: InputCategory) -> CsvInputHandler:
        return CsvInputHandler(category, settings, session)

    return factory


def sample_handlers(
    settings: Settings,
    session: AsyncSession,
    *,
    base_dir: Path | None = None,
) -> HandlerFactory:
    def factory(category: InputCategory) -> CsvInputHandler:
        return CsvInputHandler.sample(category, settings, session, base_dir=base_dir)

    return factory


@dataclass(frozen=True, slots=True)
class InputLoadResult:
    pipeline: str
    rows: Mapping[InputCategory, int]

    @property
    def total(self) -> int:
        return sum(self.rows.values())


class InputLoader:
    """Заполнить временное хранилище данными, которые нужны пайплайну.

    Категории грузятся последовательно в стандартном порядке
    (PERSONAL -> COURSE -> ENROLLMENT -> GRADE -> ACTIVITY),
    по одному handler на категорию. Ошибка любой категории
    останавливает загрузку и уходит вызывающему как есть.
    """

    def __init__(self, handler_factory: HandlerFactory) -> None:
        self._handler_factory = handler_factory

    async def load(self, config: PipelineConfig) -> InputLoadResult:
        ctx = ctx_prefix(pipeline=config.type)
        categories = config.input_categories()
        logger.info(
            "%s INPUT start categories=%s",
            ctx,
            ",".join(c.value for c in categories) or "-",
        )

        rows: dict[InputCategory, int] = {}
        for category in categories:
            handler = self._handler_factory(category)
            rows[category] = await handler.load(
                required_columns=config.required_columns(category),
                declared_columns=config.declared_columns(category),
            )

        result = InputLoadResult(pipeline=config.type, rows=rows)
        logger.info("%s INPUT done total_rows=%d", ctx, result.total)
        return result
