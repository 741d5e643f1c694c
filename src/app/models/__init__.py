from .pipeline_config import (
    InputField,
    Output,
    OutputField,
    PipelineConfig,
    Processor,
)

__all__ = [
    "InputField",
    "Output",
    "OutputField",
    "PipelineConfig",
    "Processor",
]
