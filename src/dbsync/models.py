"""Data models for bucket and object listings."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class BucketSummary:
    """A bucket as reported by ListBuckets."""

    name: str
    creation_date: Optional[datetime] = None

    @classmethod
    def from_response(cls, entry: dict[str, Any]) -> "BucketSummary":
        return cls(name=entry["Name"], creation_date=entry.get("CreationDate"))


@dataclass(frozen=True)
class ObjectSummary:
    """Snapshot of a single object from a listing call."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None

    @classmethod
    def from_response(cls, entry: dict[str, Any]) -> "ObjectSummary":
        return cls(
            key=entry["Key"],
            size=int(entry.get("Size", 0)),
            last_modified=entry.get("LastModified"),
        )


@dataclass
class ResolveResult:
    """Outcome of a resolver run.

    ``objects`` is ordered and capped at the requested maximum. ``total_seen``
    counts every matching entry returned before truncation, so it may exceed
    ``len(objects)``.
    """

    objects: list[ObjectSummary] = field(default_factory=list)
    total_seen: int = 0
    folders: list[str] = field(default_factory=list)
    truncated: bool = False

    @property
    def found(self) -> bool:
        return bool(self.objects)

    @property
    def hidden(self) -> int:
        return max(self.total_seen - len(self.objects), 0)
