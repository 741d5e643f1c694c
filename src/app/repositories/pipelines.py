from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from src.app.core.constants import PIPELINE_FILE_SUFFIXES
from src.app.core.exceptions import PipelineDefinitionError
from src.app.schemas.pipelines import PipelineDocument

logger = logging.getLogger("lap_registry")


class PipelineFilesRepository:
    """Чтение описаний пайплайнов из каталога (*.yml / *.yaml / *.json).

    Только чтение и проверка схемы, без бизнес-логики:
    всегда возвращает документ или кидает PipelineDefinitionError.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def list_files(self) -> list[Path]:
        if not self.directory.is_dir():
            raise PipelineDefinitionError(
                f"Pipelines directory {str(self.directory)!r} does not exist"
            )
        suffixes = (*PIPELINE_FILE_SUFFIXES, ".json")
        return sorted(
            p for p in self.directory.iterdir()
            if p.is_file() and p.suffix.lower() in suffixes
        )

    def read_document(self, path: Path) -> PipelineDocument:
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() in PIPELINE_FILE_SUFFIXES:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
            raise PipelineDefinitionError(
                f"Cannot read pipeline file {str(path)!r}: {exc}"
            ) from exc

        if not isinstance(data, dict):
            raise PipelineDefinitionError(
                f"Pipeline file {str(path)!r} must contain a mapping, "
                f"got {type(data).__name__}"
            )

        try:
            return PipelineDocument.model_validate(data)
        except ValidationError as exc:
            raise PipelineDefinitionError(
                f"Invalid pipeline file {str(path)!r}: {exc}"
            ) from exc

    def list_documents(self) -> Sequence[PipelineDocument]:
        docs = []
        for path in self.list_files():
            docs.append(self.read_document(path))
            logger.debug("Read pipeline file %s", path)
        return docs
