"""Item store collaborator.

The engine never talks to storage. Callers load a snapshot, run engine
functions on it and save the changed records back. ``InMemoryItemStore``
keeps one JSON blob per item kind, the same shape the tracker has always
persisted, and re-validates every record on load.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Iterable, Protocol

from loguru import logger

from sprout.config import Settings
from sprout.core.srs.ladder import ItemKind
from sprout.schemas.items import ItemBase, parse_items
from sprout.utils.exceptions import CorruptRecordError


class ItemStore(Protocol):
    """Key-value persistence for item records, scoped per kind."""

    def load(self, kind: ItemKind) -> list[ItemBase]:
        ...

    def save(self, kind: ItemKind, items: Iterable[ItemBase]) -> None:
        ...


class InMemoryItemStore:
    """Thread-safe store holding one serialized blob per kind."""

    def __init__(self, *, settings: Settings | None = None) -> None:
        self._lock = threading.Lock()
        self._blobs: dict[str, str] = {}
        self._settings = settings

    @staticmethod
    def _key(kind: ItemKind) -> str:
        return f"items:{ItemKind(kind).value}"

    def _read(self, key: str) -> list[dict[str, Any]]:
        payload = self._blobs.get(key)
        if not payload:
            return []
        try:
            records = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise CorruptRecordError(f"Stored blob {key!r} is not valid JSON") from exc
        if not isinstance(records, list) or not all(isinstance(record, dict) for record in records):
            raise CorruptRecordError(f"Stored blob {key!r} is not a list of records")
        return records

    def load(self, kind: ItemKind) -> list[ItemBase]:
        with self._lock:
            records = self._read(self._key(kind))
        return parse_items(records, kind=kind, settings=self._settings)

    def save(self, kind: ItemKind, items: Iterable[ItemBase]) -> None:
        key = self._key(kind)
        updates = {}
        for item in items:
            if item.item_kind is not ItemKind(kind):
                raise CorruptRecordError(
                    f"Cannot save {item.kind} {item.id!r} under {ItemKind(kind).value}",
                    {"id": item.id, "kind": item.kind},
                )
            updates[item.id] = item.model_dump(mode="json")
        with self._lock:
            records = {record.get("id"): record for record in self._read(key)}
            records.update(updates)
            self._blobs[key] = json.dumps(list(records.values()))
        logger.debug(f"Saved {len(updates)} {ItemKind(kind).value} record(s)")

    def import_blob(self, kind: ItemKind, payload: str) -> None:
        """Replace a kind's blob with an externally produced JSON payload."""

        with self._lock:
            self._blobs[self._key(kind)] = payload

    def clear(self) -> None:
        """Drop every stored blob (used by test environments)."""

        with self._lock:
            self._blobs.clear()


__all__ = ["InMemoryItemStore", "ItemStore"]
