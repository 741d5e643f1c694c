# CSV extract layouts, one per input category.
# Column names double as temp-storage columns (table = category name, e.g. COURSE).
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping

from src.app.core.enums import InputCategory

ColumnKind = str  # "str" | "int" | "float" | "date"


def _to_int(raw: str) -> int:
    # "12.0" shows up in spreadsheet exports
    f = float(raw)
    if not f.is_integer():
        raise ValueError(f"not an integer: {raw!r}")
    return int(f)


_CONVERTERS: Mapping[ColumnKind, Callable[[str], Any]] = {
    "str": str,
    "int": _to_int,
    "float": float,
    "date": date.fromisoformat,
}


@dataclass(frozen=True, slots=True)
class Column:
    name: str
    kind: ColumnKind = "str"
    required: bool = False

    def convert(self, raw: str) -> Any:
        return _CONVERTERS[self.kind](raw)


@dataclass(frozen=True, slots=True)
class CategoryLayout:
    category: InputCategory
    columns: tuple[Column, ...]

    @property
    def table(self) -> str:
        return self.category.value

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def required_names(self) -> frozenset[str]:
        return frozenset(c.name for c in self.columns if c.required)

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(name)


_STUDENT_ID = Column("ALTERNATIVE_ID", required=True)
_COURSE_ID = Column("COURSE_ID", required=True)

LAYOUTS: Mapping[InputCategory, CategoryLayout] = {
    InputCategory.PERSONAL: CategoryLayout(
        InputCategory.PERSONAL,
        (
            _STUDENT_ID,
            Column("PERCENTILE", "float"),
            Column("SAT_VERBAL", "int"),
            Column("SAT_MATH", "int"),
            Column("ACT_COMPOSITE", "int"),
            Column("AGE", "int"),
            Column("RACE"),
            Column("GENDER"),
            Column("ENROLLMENT_STATUS"),
            Column("EARNED_CREDIT_HOURS", "float"),
            Column("GPA_CUMULATIVE", "float"),
            Column("GPA_SEMESTER", "float"),
            Column("STANDING"),
            Column("PELL_STATUS"),
        ),
    ),
    InputCategory.COURSE: CategoryLayout(
        InputCategory.COURSE,
        (
            _COURSE_ID,
            Column("SUBJECT"),
            Column("ENROLLMENT", "int"),
            Column("ONLINE_FLAG"),
        ),
    ),
    InputCategory.ENROLLMENT: CategoryLayout(
        InputCategory.ENROLLMENT,
        (
            _STUDENT_ID,
            _COURSE_ID,
            Column("FINAL_GRADE"),
            Column("WITHDRAWL_DATE", "date"),
        ),
    ),
    InputCategory.GRADE: CategoryLayout(
        InputCategory.GRADE,
        (
            _STUDENT_ID,
            _COURSE_ID,
            Column("GRADABLE_OBJECT"),
            Column("CATEGORY"),
            Column("MAX_POINTS", "float"),
            Column("EARNED_POINTS", "float"),
            Column("WEIGHT", "float"),
            Column("GRADE_DATE", "date"),
        ),
    ),
    InputCategory.ACTIVITY: CategoryLayout(
        InputCategory.ACTIVITY,
        (
            _STUDENT_ID,
            _COURSE_ID,
            Column("EVENT"),
            Column("EVENT_DATE", "date"),
        ),
    ),
}


def layout_for(category: InputCategory) -> CategoryLayout:
    return LAYOUTS[category]
