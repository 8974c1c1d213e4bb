# jobassist/repositories/generic.py
"""
Table-generic helpers reused by the thin endpoints.

Table and column names are code constants checked against the model metadata,
never request input; values always travel as bound parameters.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Table, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobassist.db.base import Base
from jobassist.db import models  # noqa: F401  registers tables


def camelize(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(p.title() for p in rest)


def camel_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {camelize(k): v for k, v in row.items()}


def _table(name: str) -> Table:
    table = Base.metadata.tables.get(name)
    if table is None:
        raise ValueError(f"Unknown table {name!r}")
    return table


def _columns(table: Table, names: Iterable[str]):
    cols = []
    for n in names:
        if n not in table.c:
            raise ValueError(f"Unknown column {n!r} on {table.name}")
        cols.append(table.c[n])
    return cols


def select_all(db: Session, table_name: str, columns: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    table = _table(table_name)
    stmt = select(*_columns(table, columns)) if columns else select(table)
    return [dict(r) for r in db.execute(stmt).mappings()]


def select_column(db: Session, table_name: str, column: str) -> List[Any]:
    table = _table(table_name)
    (col,) = _columns(table, [column])
    return list(db.execute(select(col)).scalars())


def insert_row(db: Session, table_name: str, values: Dict[str, Any]) -> int:
    """Insert one row and commit; returns the generated primary key."""
    table = _table(table_name)
    _columns(table, values.keys())
    try:
        result = db.execute(insert(table).values(**values))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return result.inserted_primary_key[0]


class RecordNotFound(LookupError):
    pass


class NotOwner(PermissionError):
    pass
