from __future__ import annotations

import re

from .enums import InputCategory

# pipeline type key, e.g. "marist_student_risk"
PIPELINE_TYPE_RE = re.compile(r"^[a-z0-9_]+$")

# separator between category and column in an input field name: COURSE.COURSE_ID
INPUT_FIELD_SEPARATOR = "."

# PERSONAL first: other extracts reference ALTERNATIVE_ID / COURSE_ID
CATEGORY_LOAD_ORDER: tuple[InputCategory, ...] = tuple(InputCategory)

PIPELINE_FILE_SUFFIXES: tuple[str, ...] = (".yml", ".yaml")


def is_valid_pipeline_type(value: str) -> bool:
    return bool(PIPELINE_TYPE_RE.fullmatch(value or ""))
