from __future__ import annotations

import logging
from dataclasses import dataclass

from src.app.models.pipeline_config import PipelineConfig
from src.runner.ports.processor import ProcessorEngine
from src.runner.ports.writer import OutputWriter
from src.runner.services.input_loader import InputLoader
from src.runner.services.logctx import ctx_prefix

logger = logging.getLogger("lap_runner")


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    rows_loaded: int
    rows_written: int


class PipelineExecutor:
    """Один прогон пайплайна: входы -> процессоры -> выходы.

    Ретраи и backoff здесь не делаются, ошибка любого шага уходит наверх.
    """

    def __init__(
        self,
        *,
        inputs: InputLoader,
        engine: ProcessorEngine,
        writer: OutputWriter,
    ) -> None:
        self._inputs = inputs
        self._engine = engine
        self._writer = writer

    async def execute(self, config: PipelineConfig) -> ExecutionResult:
        ctx = ctx_prefix(pipeline=config.type)

        try:
            loaded = await self._inputs.load(config)

            for processor in config.processors:
                logger.info(
                    "%s PROCESS name=%s type=%s file=%s",
                    ctx, processor.name, processor.type.value, processor.filename,
                )
                await self._engine.run(processor)

            rows_written = 0
            for output in config.outputs:
                written = int(await self._writer.write(output) or 0)
                rows_written += written
                logger.info("%s OUTPUT %r written=%d", ctx, output, written)

        except Exception:
            logger.exception("%s execution failed", ctx)
            raise

        logger.info(
            "%s done rows_loaded=%d rows_written=%d", ctx, loaded.total, rows_written
        )
        return ExecutionResult(rows_loaded=loaded.total, rows_written=rows_written)
