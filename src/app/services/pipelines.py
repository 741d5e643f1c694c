from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from src.app.core.exceptions import (
    DuplicatePipelineError,
    PipelineDefinitionError,
    PipelineError,
    PipelineNotFoundError,
)
from src.app.models.pipeline_config import PipelineConfig
from src.app.repositories.pipelines import PipelineFilesRepository

logger = logging.getLogger("lap_registry")


class PipelineRegistry:
    """Реестр пайплайнов процесса.

    Конфиги попадают сюда уже собранными и запечатанными, поэтому
    читать их можно из любого количества прогонов без блокировок.
    Регистрация выполняется один раз при старте, из одного потока.
    """

    def __init__(self, repo: PipelineFilesRepository | None = None) -> None:
        self.repo = repo
        self._configs: dict[str, PipelineConfig] = {}

    @classmethod
    def from_directory(cls, directory: Path) -> "PipelineRegistry":
        registry = cls(PipelineFilesRepository(directory))
        registry.load_directory()
        return registry

    # ---------- регистрация ----------

    def register(self, config: PipelineConfig) -> PipelineConfig:
        """Зарегистрировать пайплайн. Дубликат type -> DuplicatePipelineError."""
        if config.type in self._configs:
            raise DuplicatePipelineError(
                f"Pipeline type {config.type!r} is already registered"
            )
        self._configs[config.type] = config

        logger.info(
            "Registered pipeline type=%s inputs=%d processors=%d outputs=%d",
            config.type,
            len(config.inputs),
            len(config.processors),
            len(config.outputs),
        )
        return config

    def load_directory(self) -> list[PipelineConfig]:
        """Прочитать все файлы каталога и зарегистрировать пайплайны.

        Сначала собираются все конфиги, регистрация только если собрались все.
        Любая ошибка (схема, перечисления, форма выходов, дубликат)
        прерывает загрузку, реестр при этом не меняется.
        """
        if self.repo is None:
            raise ValueError("PipelineRegistry has no repository to load from")

        built: list[tuple[Path, PipelineConfig]] = []
        for path in self.repo.list_files():
            doc = self.repo.read_document(path)
            try:
                built.append((path, doc.to_config()))
            except PipelineError as exc:
                raise PipelineDefinitionError(
                    f"Invalid pipeline file {str(path)!r}: {exc}"
                ) from exc

        seen = set(self._configs)
        for path, config in built:
            if config.type in seen:
                raise DuplicatePipelineError(
                    f"Pipeline type {config.type!r} from {str(path)!r} is already registered"
                )
            seen.add(config.type)

        loaded = [self.register(config) for _, config in built]
        logger.info(
            "Loaded %d pipeline(s) from %s", len(loaded), self.repo.directory
        )
        return loaded

    # ---------- чтение ----------

    def get(self, pipeline_type: str) -> PipelineConfig:
        """Вернуть пайплайн по type или бросить PipelineNotFoundError."""
        try:
            return self._configs[pipeline_type]
        except KeyError:
            raise PipelineNotFoundError(
                f"Pipeline {pipeline_type!r} not found"
            ) from None

    def list_pipelines(self) -> Sequence[PipelineConfig]:
        return [self._configs[k] for k in sorted(self._configs)]

    def __contains__(self, pipeline_type: object) -> bool:
        return pipeline_type in self._configs

    def __len__(self) -> int:
        return len(self._configs)
