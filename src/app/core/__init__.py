from __future__ import annotations

from .enums import InputCategory, OutputType, ProcessorType
from .exceptions import (
    DuplicatePipelineError,
    InputLoadError,
    InvalidConfigValueError,
    InvalidOutputStateError,
    PipelineDefinitionError,
    PipelineError,
    PipelineNotFoundError,
)

__all__ = [
    "InputCategory",
    "OutputType",
    "ProcessorType",
    "PipelineError",
    "InvalidConfigValueError",
    "InvalidOutputStateError",
    "PipelineDefinitionError",
    "DuplicatePipelineError",
    "PipelineNotFoundError",
    "InputLoadError",
]
