"""
Relational store adapter.

Executes parameterized SQL through a SQLAlchemy engine and returns plain
dicts / affected-row counts / generated ids. Driver errors are translated:
unique-constraint violations become DuplicateKeyViolation (carrying the
offending column), everything else becomes StoreUnavailable.

Each call commits on its own unless it runs inside ``transaction()``.
"""
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from brandstore.core.errors import DuplicateKeyViolation, StoreUnavailable
from brandstore.data.database import Base
from brandstore.utils.logger import get_logger

logger = get_logger("data.relational_store")

# Driver messages for unique violations, one per dialect we run on.
_DUPLICATE_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: ([\w.]+)"),           # sqlite
    re.compile(r"Duplicate entry .* for key '([\w.]+)'"),         # mysql / mariadb
    re.compile(r"Key \(([\w]+)\)=\(.*\) already exists"),         # postgres detail
    re.compile(r"duplicate key value violates unique constraint \"([\w.]+)\""),  # postgres
)


def duplicate_column(message: str) -> Optional[str]:
    """Return the column/constraint named in a unique-violation message, else None."""
    for pattern in _DUPLICATE_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1).rsplit(".", 1)[-1]
    return None


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a write statement."""
    affected_rows: int
    insert_id: Optional[int] = None


class RelationalStore:
    """
    Thin wrapper over a SQLAlchemy engine.

    One instance is created at process start and shared by every request.
    ``transaction()`` yields a bound instance whose calls share a single
    connection and commit together.
    """

    def __init__(self, engine: Engine, connection: Optional[Connection] = None):
        self.engine = engine
        self._connection = connection

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        with _translate_errors():
            with self.engine.begin() as conn:
                yield conn

    @contextmanager
    def transaction(self) -> Iterator["RelationalStore"]:
        """Run several statements atomically. Nested calls reuse the outer transaction."""
        if self._connection is not None:
            yield self
            return
        with _translate_errors():
            with self.engine.begin() as conn:
                yield RelationalStore(self.engine, connection=conn)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        expanding: Sequence[str] = (),
    ) -> List[Dict[str, Any]]:
        """
        Run a SELECT and return rows as dicts.

        ``expanding`` names list-valued parameters used with ``IN :name``.
        """
        stmt = text(sql)
        if expanding:
            stmt = stmt.bindparams(*(bindparam(name, expanding=True) for name in expanding))
        with self._connect() as conn, _translate_errors():
            rows = conn.execute(stmt, dict(params or {})).mappings().all()
        return [dict(r) for r in rows]

    def query_one(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        """Run an UPDATE / DELETE (or other write) and report affected rows."""
        with self._connect() as conn, _translate_errors():
            result = conn.execute(text(sql), dict(params or {}))
        return QueryResult(affected_rows=result.rowcount)

    def insert(self, table: str, values: Mapping[str, Any]) -> QueryResult:
        """Insert one row and return its generated id."""
        tbl = Base.metadata.tables[table]
        with self._connect() as conn, _translate_errors():
            result = conn.execute(tbl.insert().values(**dict(values)))
        pk = result.inserted_primary_key
        insert_id = pk[0] if pk else None
        return QueryResult(affected_rows=result.rowcount, insert_id=insert_id)

    def insert_many(self, table: str, rows: Sequence[Mapping[str, Any]]) -> QueryResult:
        """Insert all rows in one executemany call."""
        if not rows:
            return QueryResult(affected_rows=0)
        tbl = Base.metadata.tables[table]
        with self._connect() as conn, _translate_errors():
            result = conn.execute(tbl.insert(), [dict(r) for r in rows])
        affected = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)
        return QueryResult(affected_rows=affected)

    def ping(self) -> bool:
        try:
            self.query("SELECT 1 AS ok")
            return True
        except StoreUnavailable:
            return False

    def dispose(self) -> None:
        self.engine.dispose()


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except StoreUnavailable:
        raise
    except IntegrityError as e:
        message = str(e.orig) if e.orig is not None else str(e)
        column = duplicate_column(message)
        if column:
            logger.info(f"Duplicate key on {column}: {message}")
            raise DuplicateKeyViolation(column, message) from e
        logger.error(f"Integrity error: {message}")
        raise StoreUnavailable(f"Database error: {message}") from e
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}", exc_info=True)
        raise StoreUnavailable("Database error") from e
