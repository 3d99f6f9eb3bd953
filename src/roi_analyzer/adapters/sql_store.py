# src/roi_analyzer/adapters/sql_store.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, create_engine

from roi_analyzer.domain.ports import KeyValueStore, StorageError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueRow(SQLModel, table=True):
    __tablename__ = "kv_entries"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False),
    )


class SqlKeyValueStore(KeyValueStore):
    def __init__(self, uri: str = "sqlite:///roi_analyzer.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def get(self, key: str) -> str | None:
        try:
            with Session(self.engine) as session:
                row = session.get(KeyValueRow, key)
                return row.value if row is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"read of {key!r} failed: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with Session(self.engine) as session:
                row = session.get(KeyValueRow, key)
                if row is None:
                    row = KeyValueRow(key=key, value=value)
                else:
                    row.value = value
                    row.updated_at = _utcnow()
                session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"write of {key!r} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with Session(self.engine) as session:
                row = session.get(KeyValueRow, key)
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"delete of {key!r} failed: {e}") from e
