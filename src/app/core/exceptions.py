from __future__ import annotations


class PipelineError(Exception):
    """Базовая ошибка домена аналитических пайплайнов."""


class InvalidConfigValueError(PipelineError, ValueError):
    """Значение из конфигурации не соответствует ни одному допустимому варианту."""


class InvalidOutputStateError(PipelineError, RuntimeError):
    """Поле не той формы для данного Output (или Output уже опубликован)."""


class PipelineDefinitionError(PipelineError):
    """Файл описания пайплайна не читается или не проходит схему."""


class DuplicatePipelineError(PipelineError):
    """Пайплайн с таким type уже зарегистрирован."""


class PipelineNotFoundError(PipelineError):
    """Пайплайн с указанным type не найден."""


class InputLoadError(PipelineError):
    """Источник категории не удалось прочитать или загрузить во временное хранилище."""
