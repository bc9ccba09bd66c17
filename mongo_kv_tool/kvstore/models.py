"""
Type models for kvstore operations.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ValueKind(Enum):
    """Shapes a stored value can take."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    EMBEDDED_DOCUMENT = "embedded_document"
    ENCODED_OBJECT = "encoded_object"


@dataclass(frozen=True)
class CaseInsensitiveKey:
    """Key that matches stored keys regardless of letter case."""

    text: str

    def compile(self) -> re.Pattern[str]:
        """Anchored pattern: whole-key match, ignoring case."""
        return re.compile(f"^{re.escape(self.text)}$", re.IGNORECASE)

    def __str__(self) -> str:
        return self.text


@dataclass
class StoredRecord:
    """A single {key, value} record."""

    key: Any
    value: Any


class StoredObject(BaseModel):
    """
    Base class for domain objects stored as values.

    Subclasses are written as embedded documents and decoded field by field
    on the way back out.
    """

    model_config = ConfigDict(extra="ignore")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return self.model_dump_json()
