"""
Key/value blob stores used to persist interactive bracket state.

The bracket core only needs get(key) -> str | None, set(key, value) and
set_many(items). set_many writes items in the order given; SqlBlobStore
commits them together.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Mapping, Optional, Protocol

from sqlmodel import Session

from madness.models.bracket_blob import BracketBlob


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def set_many(self, items: Mapping[str, str]) -> None:
        ...


class MemoryBlobStore:
    """Dict-backed store for tests and previews."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def set_many(self, items: Mapping[str, str]) -> None:
        for key, value in items.items():
            self.set(key, value)


class SqlBlobStore:
    """BracketBlob table store. Each set()/set_many() is one commit."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> Optional[str]:
        row = self.session.get(BracketBlob, key)
        return row.value if row else None

    def _stage(self, key: str, value: str) -> None:
        row = self.session.get(BracketBlob, key)
        if row is None:
            row = BracketBlob(key=key, value=value)
        else:
            row.value = value
            row.updated_at = datetime.utcnow()
        self.session.add(row)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, items: Mapping[str, str]) -> None:
        try:
            for key, value in items.items():
                self._stage(key, value)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
