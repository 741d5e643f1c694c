from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from src.app.core.constants import (
    CATEGORY_LOAD_ORDER,
    INPUT_FIELD_SEPARATOR,
    is_valid_pipeline_type,
)
from src.app.core.enums import InputCategory, OutputType, ProcessorType
from src.app.core.exceptions import InvalidConfigValueError, InvalidOutputStateError

# Output() is only reachable through make_storage()/make_csv()
_FACTORY_TOKEN = object()


def _require(value: Optional[str], *, what: str) -> str:
    if not value:
        raise InvalidConfigValueError(f"{what} is required, got {value!r}")
    return value


# ======================
#   Входы
# ======================

@dataclass(frozen=True, slots=True)
class InputField:
    """Одно входное поле пайплайна во временном хранилище.

    Имя задаётся как КАТЕГОРИЯ.ПОЛЕ, например COURSE.COURSE_ID или PERSONAL.AGE.
    """

    name: str
    required: bool

    @classmethod
    def make(cls, name: str, required: bool) -> "InputField":
        """Создать входное поле (имя не валидируется, это забота загрузчика)."""
        return cls(name=name, required=required)

    @property
    def category(self) -> InputCategory:
        prefix, sep, _ = self.name.partition(INPUT_FIELD_SEPARATOR)
        if not sep:
            raise InvalidConfigValueError(
                f"input field {self.name!r} is not category-qualified "
                f"(expected CATEGORY{INPUT_FIELD_SEPARATOR}FIELD)"
            )
        return InputCategory.from_string(prefix)

    @property
    def column(self) -> str:
        return self.name.partition(INPUT_FIELD_SEPARATOR)[2]


# ======================
#   Процессоры
# ======================

@dataclass(frozen=True, slots=True)
class Processor:
    """Ссылка на внешний шаг обработки. Содержимое файла здесь не интерпретируется."""

    name: str
    type: ProcessorType
    filename: str

    def __post_init__(self) -> None:
        _require(self.name, what="processor name")
        if not isinstance(self.type, ProcessorType):
            raise InvalidConfigValueError(f"processor type is required, got {self.type!r}")
        _require(self.filename, what="processor filename")

    @classmethod
    def make_kettle(cls, name: str, filename: str) -> "Processor":
        """Процессор на базе Pentaho Kettle.

        name: имя шага (для логов и отображения)
        filename: путь к ktr/kjb файлу (абсолютный или от каталога пайплайнов)
        """
        return cls(name=name, type=ProcessorType.KETTLE, filename=filename)


# ======================
#   Выходы
# ======================

@dataclass(frozen=True, slots=True)
class OutputField:
    """Одно поле выхода: source во временном хранилище -> target (STORAGE) или header (CSV)."""

    type: OutputType
    source: str
    target: Optional[str] = None
    header: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, OutputType):
            raise InvalidConfigValueError(f"output field type is required, got {self.type!r}")
        _require(self.source, what="output field source")

        if self.type is OutputType.STORAGE:
            if not self.target or self.header is not None:
                raise InvalidOutputStateError(
                    f"STORAGE field {self.source!r} must have a target and no header"
                )
        elif not self.header or self.target is not None:
            raise InvalidOutputStateError(
                f"CSV field {self.source!r} must have a header and no target"
            )


class Output:
    """Куда сохранить результат пайплайна.

    Временные данные пайплайна удаляются после завершения, выходы
    описывают, что и куда скопировать: в постоянное хранилище (STORAGE)
    или в CSV-файл (CSV). Порядок полей = порядок колонок при записи.
    """

    __slots__ = ("_type", "_from", "_to", "_filename", "_fields", "_sealed")

    def __init__(
        self,
        token: object,
        *,
        type: OutputType,
        from_: str,
        to: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> None:
        if token is not _FACTORY_TOKEN:
            raise TypeError("use Output.make_storage() or Output.make_csv()")
        self._type = type
        self._from = from_
        self._to = to
        self._filename = filename
        self._fields: list[OutputField] = []
        self._sealed = False

    @classmethod
    def make_storage(cls, from_: str, to: str) -> "Output":
        """Копирование из временного хранилища в постоянное.

        from_: таблица/коллекция во временном хранилище
        to: таблица/коллекция в постоянном хранилище
        """
        return cls(
            _FACTORY_TOKEN,
            type=OutputType.STORAGE,
            from_=_require(from_, what="output source container"),
            to=_require(to, what="output target container"),
        )

    @classmethod
    def make_csv(cls, from_: str, filename: str) -> "Output":
        """Копирование из временного хранилища в CSV-файл."""
        return cls(
            _FACTORY_TOKEN,
            type=OutputType.CSV,
            from_=_require(from_, what="output source container"),
            filename=_require(filename, what="output filename"),
        )

    @property
    def type(self) -> OutputType:
        return self._type

    @property
    def from_(self) -> str:
        return self._from

    @property
    def to(self) -> Optional[str]:
        return self._to

    @property
    def filename(self) -> Optional[str]:
        return self._filename

    @property
    def fields(self) -> tuple[OutputField, ...]:
        return tuple(self._fields)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True

    def _check_can_append(self, expected: OutputType) -> None:
        if self.type is not expected:
            raise InvalidOutputStateError(
                f"Can only add {expected.value} fields to a {expected.value} "
                f"type output, this type is: {self.type.value}"
            )
        if self._sealed:
            raise InvalidOutputStateError(
                f"Output from={self.from_!r} is already published, fields are read-only"
            )

    def add_field_storage(self, source: str, target: str) -> OutputField:
        """Добавить поле source (временное хранилище) -> target (постоянное хранилище)."""
        self._check_can_append(OutputType.STORAGE)
        field = OutputField(type=OutputType.STORAGE, source=source, target=target)
        self._fields.append(field)
        return field

    def add_field_csv(self, source: str, header: str) -> OutputField:
        """Добавить поле source (временное хранилище) -> колонка header в CSV."""
        self._check_can_append(OutputType.CSV)
        field = OutputField(type=OutputType.CSV, source=source, header=header)
        self._fields.append(field)
        return field

    def __repr__(self) -> str:
        dest = self.to if self.type is OutputType.STORAGE else self.filename
        return (
            f"Output(type={self.type.value}, from_={self.from_!r}, "
            f"dest={dest!r}, fields={len(self._fields)})"
        )


# ======================
#   Пайплайн
# ======================

@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Полное описание одного пайплайна.

    - type: уникальный ключ (строчные буквы, цифры, '_'), например marist_student_risk
    - name / description: для людей (и рекомендации по запуску модели)
    - stats: индикаторы качества модели (accuracy, доверительный интервал и т.п.)
    - inputs: требуемые входные поля
    - processors: шаги обработки (kettle ktr/kjb)
    - outputs: что сохранить после выполнения
    """

    type: str
    name: str
    description: Optional[str]
    stats: Mapping[str, Any]
    inputs: tuple[InputField, ...]
    processors: tuple[Processor, ...]
    outputs: tuple[Output, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not is_valid_pipeline_type(self.type):
            raise InvalidConfigValueError(
                f"pipeline type {self.type!r} must use only lowercase letters, digits and '_'"
            )
        _require(self.name, what="pipeline name")

        inputs = tuple(self.inputs)
        seen: set[str] = set()
        for field in inputs:
            if not isinstance(field, InputField):
                raise InvalidConfigValueError(f"expected InputField, got {field!r}")
            if field.name in seen:
                raise InvalidConfigValueError(
                    f"Duplicate input field {field.name!r} in pipeline={self.type}"
                )
            seen.add(field.name)
            # fails on names without a known CATEGORY. prefix
            _ = field.category

        processors = tuple(self.processors)
        for processor in processors:
            if not isinstance(processor, Processor):
                raise InvalidConfigValueError(f"expected Processor, got {processor!r}")

        outputs = tuple(self.outputs)
        for output in outputs:
            if not isinstance(output, Output):
                raise InvalidConfigValueError(f"expected Output, got {output!r}")

        object.__setattr__(self, "stats", MappingProxyType(dict(self.stats or {})))
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(self, "processors", processors)
        object.__setattr__(self, "outputs", outputs)

        # last step: nothing above may fail once outputs are sealed
        for output in outputs:
            output.seal()

    @classmethod
    def make(
        cls,
        *,
        type: str,
        name: str,
        description: Optional[str] = None,
        stats: Optional[Mapping[str, Any]] = None,
        inputs: Iterable[InputField] = (),
        processors: Iterable[Processor] = (),
        outputs: Iterable[Output] = (),
    ) -> "PipelineConfig":
        """Собрать пайплайн. Проверки в __post_init__, выходы запечатываются последними."""
        return cls(
            type=type,
            name=name,
            description=description,
            stats=stats or {},
            inputs=tuple(inputs),
            processors=tuple(processors),
            outputs=tuple(outputs),
        )

    def input_categories(self) -> tuple[InputCategory, ...]:
        used = {f.category for f in self.inputs}
        return tuple(c for c in CATEGORY_LOAD_ORDER if c in used)

    def required_columns(self, category: InputCategory) -> frozenset[str]:
        return frozenset(
            f.column for f in self.inputs if f.required and f.category is category
        )

    def declared_columns(self, category: InputCategory) -> frozenset[str]:
        return frozenset(f.column for f in self.inputs if f.category is category)
