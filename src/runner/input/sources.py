from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from src.app.core.enums import InputCategory

SAMPLE_DATA_DIR = Path(__file__).resolve().parent / "sample_data"


class SourceResolver(Protocol):
    """Где лежат данные категории. Единственное, что отличает sample-вариант."""

    def resolve(self, category: InputCategory) -> Path:
        ...


@dataclass(frozen=True, slots=True)
class ConfiguredSource:
    """<input_dir>/<category>.csv из настроек прогона."""

    input_dir: Path

    def resolve(self, category: InputCategory) -> Path:
        return Path(self.input_dir) / category.filename


@dataclass(frozen=True, slots=True)
class SampleSource:
    """Пример данных: встроенный каталог sample_data или указанный base_dir."""

    base_dir: Path | None = None

    def resolve(self, category: InputCategory) -> Path:
        base = Path(self.base_dir) if self.base_dir is not None else SAMPLE_DATA_DIR
        return base / category.filename
