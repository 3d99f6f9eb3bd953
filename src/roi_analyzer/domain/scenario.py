from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from roi_analyzer.domain.property import InputSnapshot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Scenario(BaseModel):
    """
    A named, persisted copy of an InputSnapshot.

    Stored as {id, name, createdAt, data}.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    data: InputSnapshot = Field(default_factory=InputSnapshot)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return "" if v is None else str(v)
