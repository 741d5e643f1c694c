from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.app.core.constants import is_valid_pipeline_type
from src.app.core.enums import OutputType, ProcessorType
from src.app.models.pipeline_config import (
    InputField,
    Output,
    PipelineConfig,
    Processor,
)


# ======================
#   Вложенные документы
# ======================

class InputFieldDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    required: bool = False

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("input field name must not be empty")
        return v


class ProcessorDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str = ProcessorType.KETTLE.value
    name: str
    file: str


class OutputFieldDocument(BaseModel):
    """Поле выхода: ровно одно из target (STORAGE) / header (CSV)."""

    model_config = ConfigDict(extra="forbid")

    source: str
    target: str | None = None
    header: str | None = None

    @model_validator(mode="after")
    def _target_xor_header(self) -> "OutputFieldDocument":
        if (self.target is None) == (self.header is None):
            raise ValueError(
                f"output field {self.source!r} needs exactly one of target/header"
            )
        return self


class OutputDocument(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: str
    from_: str = Field(alias="from")
    to: str | None = None
    filename: str | None = None
    fields: list[OutputFieldDocument] = Field(default_factory=list)

    @model_validator(mode="after")
    def _destination_matches_type(self) -> "OutputDocument":
        # STORAGE -> только to, CSV -> только filename
        out_type = OutputType.from_string(self.type)
        if out_type is OutputType.STORAGE:
            if not self.to or self.filename is not None:
                raise ValueError(
                    f"STORAGE output from {self.from_!r} needs 'to' and no 'filename'"
                )
        elif not self.filename or self.to is not None:
            raise ValueError(
                f"CSV output from {self.from_!r} needs 'filename' and no 'to'"
            )
        return self


# ======================
#   Документ пайплайна
# ======================

class PipelineDocument(BaseModel):
    """Описание пайплайна в том виде, в каком оно лежит в файле.

    Схема проверяет только структуру. Строки-перечисления и форма полей
    выходов проверяются при сборке PipelineConfig через фабрики модели.
    """

    model_config = ConfigDict(extra="forbid")

    type: str
    name: str
    description: str | None = None
    stats: dict[str, Any] = Field(default_factory=dict)
    inputs: list[InputFieldDocument] = Field(default_factory=list)
    processors: list[ProcessorDocument] = Field(default_factory=list)
    outputs: list[OutputDocument] = Field(default_factory=list)

    @field_validator("type")
    @classmethod
    def _type_key(cls, v: str) -> str:
        if not is_valid_pipeline_type(v):
            raise ValueError(
                "type must use only lowercase letters, digits and '_' "
                "(e.g. 'marist_student_risk')"
            )
        return v

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @model_validator(mode="after")
    def _unique_inputs(self) -> "PipelineDocument":
        seen: set[str] = set()
        dupes: list[str] = []
        for f in self.inputs:
            if f.name in seen:
                dupes.append(f.name)
            seen.add(f.name)
        if dupes:
            raise ValueError(f"duplicate input fields: {sorted(set(dupes))}")
        return self

    def to_config(self) -> PipelineConfig:
        """Собрать неизменяемый PipelineConfig только через фабрики модели."""
        processors: list[Processor] = []
        for p in self.processors:
            # one variant for now, but the string still has to be a known type
            ProcessorType.from_string(p.type)
            processors.append(Processor.make_kettle(p.name, p.file))

        outputs: list[Output] = []
        for o in self.outputs:
            out_type = OutputType.from_string(o.type)
            if out_type is OutputType.STORAGE:
                output = Output.make_storage(o.from_, o.to)
            else:
                output = Output.make_csv(o.from_, o.filename)

            for f in o.fields:
                if f.target is not None:
                    output.add_field_storage(f.source, f.target)
                else:
                    output.add_field_csv(f.source, f.header)
            outputs.append(output)

        return PipelineConfig.make(
            type=self.type,
            name=self.name,
            description=self.description,
            stats=self.stats,
            inputs=[InputField.make(f.name, f.required) for f in self.inputs],
            processors=processors,
            outputs=outputs,
        )
