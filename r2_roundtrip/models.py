"""
Data structures passed between the workflow and the object store.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from r2_roundtrip.configuration import DEFAULT_KEY_FORMAT


def default_object_key(now: Optional[datetime] = None) -> str:
    """Timestamp-derived key used when no object key is configured."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.strftime(DEFAULT_KEY_FORMAT)


def build_sample_payload(now: Optional[datetime] = None) -> bytes:
    """JSON array of simple records, the default upload body."""
    if now is None:
        now = datetime.now(timezone.utc)
    records = [{"A": "1", "B": now.strftime("%Y-%m-%dT%H:%M:%SZ")}]
    return json.dumps(records).encode("utf-8")


@dataclass(frozen=True)
class TransferRequest:
    """One object to write."""

    key: str
    payload: bytes
    content_length: int

    def __post_init__(self):
        if not self.key:
            raise ValueError("Transfer key must not be empty")
        if self.content_length != len(self.payload):
            raise ValueError(
                f"content_length {self.content_length} does not match payload size {len(self.payload)}"
            )

    @classmethod
    def for_payload(cls, payload: bytes, key: Optional[str] = None) -> "TransferRequest":
        """Build a request, falling back to a timestamp key when none is given."""
        return cls(key=key or default_object_key(), payload=payload, content_length=len(payload))


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a successful read-back."""

    key: str
    byte_count: int
    elapsed_seconds: float
    body: bytes = field(repr=False, default=b"")


@dataclass(frozen=True)
class ObjectSummary:
    """One entry of an object listing."""

    key: str
    size: int
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None

    @staticmethod
    def from_dict(entry: Dict[str, Any]) -> "ObjectSummary":
        """Create from a ListObjectsV2 ``Contents`` entry"""
        return ObjectSummary(
            key=entry["Key"],
            size=entry.get("Size", 0),
            last_modified=entry.get("LastModified"),
            etag=entry.get("ETag"),
            storage_class=entry.get("StorageClass"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Key": self.key,
            "Size": self.size,
            "LastModified": self.last_modified.isoformat() if self.last_modified else None,
            "ETag": self.etag,
            "StorageClass": self.storage_class,
        }


@dataclass(frozen=True)
class BucketSummary:
    """One entry of a bucket listing."""

    name: str
    creation_date: Optional[datetime] = None

    @staticmethod
    def from_dict(entry: Dict[str, Any]) -> "BucketSummary":
        """Create from a ListBuckets ``Buckets`` entry"""
        return BucketSummary(name=entry["Name"], creation_date=entry.get("CreationDate"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "CreationDate": self.creation_date.isoformat() if self.creation_date else None,
        }


@dataclass(frozen=True)
class BucketHandle:
    """A bucket known to exist. ``created`` is False when it was already there."""

    name: str
    created: bool = True


def summaries_to_json(summaries: List[Any]) -> List[str]:
    """Render summaries as indented JSON documents, one per entry."""
    return [json.dumps(summary.to_dict(), indent="\t") for summary in summaries]
