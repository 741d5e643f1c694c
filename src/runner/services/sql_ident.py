import re

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_sql_ident(name: str, *, what: str) -> str:
    # identifiers are interpolated into INSERT statements, values are bound
    n = (name or "").strip()
    if not _IDENT_RE.fullmatch(n):
        raise ValueError(
            f"Invalid {what}: {n!r}. Expected plain SQL identifier, e.g. 'COURSE_ID'"
        )
    return n
