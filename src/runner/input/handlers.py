from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Iterable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.enums import InputCategory
from src.app.core.exceptions import InputLoadError
from src.config import Settings
from src.runner.input.layouts import CategoryLayout, layout_for
from src.runner.input.sources import ConfiguredSource, SampleSource, SourceResolver
from src.runner.services.db_errors import is_db_disconnect
from src.runner.services.logctx import ctx_prefix
from src.runner.services.sql_ident import validate_sql_ident

logger = logging.getLogger("lap_loader")

Row = dict[str, Any]


class CsvInputHandler:
    """Load one category's CSV extract into its temporary-storage table.

    Where the file comes from is delegated to a SourceResolver; parsing,
    typing and writing are the same for every source. A handler keeps no
    state between load() calls, only settings and the session.
    """

    def __init__(
        self,
        category: InputCategory,
        settings: Settings,
        session: AsyncSession,
        *,
        source: SourceResolver | None = None,
    ) -> None:
        self.category = category
        self.layout: CategoryLayout = layout_for(category)
        self.config = settings
        self._session = session
        self._source = source or ConfiguredSource(settings.input_dir)

    @classmethod
    def sample(
        cls,
        category: InputCategory,
        settings: Settings,
        session: AsyncSession,
        *,
        base_dir: Path | None = None,
    ) -> "CsvInputHandler":
        """Handler reading the sample extracts (bundled, or base_dir/settings.sample_dir)."""
        return cls(
            category,
            settings,
            session,
            source=SampleSource(base_dir if base_dir is not None else settings.sample_dir),
        )

    def get_file(self) -> Path:
        return self._source.resolve(self.category)

    # ----------------------------
    # Parsing
    # ----------------------------

    def _check_declared(self, columns: frozenset[str]) -> None:
        """Every column a pipeline declares must exist in the category layout."""
        unknown = columns - set(self.layout.column_names)
        if unknown:
            raise InputLoadError(
                f"{self.category.value}: input fields {sorted(unknown)} "
                f"are not part of the {self.category.value} layout"
            )

    def _match_header(
        self, path: Path, header: list[str], required_columns: frozenset[str]
    ) -> dict[str, int]:
        """Map layout column -> index in the CSV row (case-insensitive)."""
        by_name: dict[str, int] = {}
        for i, h in enumerate(header):
            name = h.strip().upper()
            if not name:
                continue
            if name in by_name:
                raise InputLoadError(f"{path}: column {name} appears more than once in header")
            by_name[name] = i

        positions: dict[str, int] = {}
        for name in self.layout.column_names:
            if name in by_name:
                positions[name] = by_name[name]

        missing = (self.layout.required_names | required_columns) - positions.keys()
        if missing:
            raise InputLoadError(
                f"{path}: missing required column(s) {sorted(missing)} "
                f"for {self.category.value}"
            )

        extra = set(by_name) - set(self.layout.column_names)
        if extra:
            logger.debug("%s ignoring columns %s", ctx_prefix(category=self.category.value), sorted(extra))
        return positions

    def _convert_row(
        self,
        path: Path,
        line_no: int,
        raw: list[str],
        positions: dict[str, int],
        required_columns: frozenset[str],
    ) -> Row:
        row: Row = {}
        for name in self.layout.column_names:
            idx = positions.get(name)
            value = raw[idx].strip() if idx is not None and idx < len(raw) else ""
            column = self.layout.column(name)

            if not value:
                if column.required or name in required_columns:
                    raise InputLoadError(
                        f"{path}:{line_no}: empty value for required column {name}"
                    )
                row[name] = None
                continue

            try:
                row[name] = column.convert(value)
            except ValueError as exc:
                raise InputLoadError(
                    f"{path}:{line_no}: column {name} expects {column.kind}, got {value!r}"
                ) from exc
        return row

    def read_rows(
        self,
        required_columns: Iterable[str] = (),
        declared_columns: Iterable[str] = (),
    ) -> list[Row]:
        """Parse the whole source into typed rows. Nothing is written here."""
        path = self.get_file()
        required = frozenset(c.upper() for c in required_columns)
        self._check_declared(required | frozenset(c.upper() for c in declared_columns))

        try:
            with open(path, newline="", encoding=self.config.csv_encoding) as f:
                reader = csv.reader(f)
                header = next(reader, None)
                if header is None:
                    raise InputLoadError(f"{path}: file is empty (no header row)")

                positions = self._match_header(path, header, required)
                rows: list[Row] = []
                for raw in reader:
                    if not any(cell.strip() for cell in raw):
                        continue
                    rows.append(
                        self._convert_row(path, reader.line_num, raw, positions, required)
                    )
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise InputLoadError(
                f"Cannot read {self.category.value} source {str(path)!r}: {exc}"
            ) from exc

        return rows

    # ----------------------------
    # Loading
    # ----------------------------

    def _insert_sql(self):
        table = validate_sql_ident(self.layout.table, what="temp table")
        cols = [validate_sql_ident(c, what="temp column") for c in self.layout.column_names]
        return text(
            f"INSERT INTO {table} ({', '.join(cols)}) "
            f"VALUES ({', '.join(':' + c for c in cols)})"
        )

    async def load(
        self,
        required_columns: Iterable[str] = (),
        declared_columns: Iterable[str] = (),
    ) -> int:
        """Read the source and write all rows in one transaction.

        Returns the number of rows written. Any parse error aborts before
        the first write; a database error rolls the category back.
        """
        ctx = ctx_prefix(category=self.category.value)
        path = self.get_file()
        logger.info("%s LOAD start file=%s", ctx, path)

        rows = self.read_rows(required_columns, declared_columns)
        if not rows:
            logger.info("%s LOAD done rows=0 (empty extract)", ctx)
            return 0

        try:
            await self._session.execute(self._insert_sql(), rows)
            await self._session.commit()
        except SQLAlchemyError as exc:
            if is_db_disconnect(exc):
                logger.warning("%s DB disconnected during load. err=%r", ctx, exc)
            else:
                await self._session.rollback()
            raise InputLoadError(
                f"Cannot write {self.category.value} rows to temporary storage: {exc}"
            ) from exc

        logger.info("%s LOAD done rows=%d", ctx, len(rows))
        return len(rows)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(category={self.category.value}, source={self._source!r})"
