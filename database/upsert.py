"""Dialect-aware INSERT ... ON CONFLICT / ON DUPLICATE KEY UPDATE builder."""
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

_INSERTS = {
    "mysql": mysql_insert,
    "mariadb": mysql_insert,
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def build_upsert(
    db: Session,
    model,
    values: Dict[str, Any],
    conflict_columns: Iterable[str],
    update_columns: Iterable[str] = (),
    update_expressions: Optional[Dict[str, Any]] = None,
):
    """Insert `values`, or on a unique-key collision overwrite `update_columns`
    with the incoming values and apply `update_expressions` (name -> SQL expr).
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f"Upsert is not supported for dialect '{dialect}'")

    stmt = insert(model).values(**values)
    if insert is mysql_insert:
        incoming = stmt.inserted
    else:
        incoming = stmt.excluded

    changes = {name: getattr(incoming, name) for name in update_columns}
    changes.update(update_expressions or {})

    if insert is mysql_insert:
        return stmt.on_duplicate_key_update(**changes)
    return stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=changes)
