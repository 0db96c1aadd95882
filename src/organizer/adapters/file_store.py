"""File-based document store adapter."""

import json
import logging
from pathlib import Path

from organizer.core.records import new_id
from organizer.ports.document_store import Filter

logger = logging.getLogger(__name__)


class FileDocumentStore:
    """
    File-based document storage.

    Implements DocumentStore protocol. Each document is a JSON file at
    ``<data_dir>/<collection>/<id>.json``.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _collection_dir(self, collection: str) -> Path:
        return self.data_dir / collection

    def _path_for(self, collection: str, doc_id: str) -> Path:
        if not doc_id or "/" in doc_id or doc_id.startswith("."):
            raise ValueError(f"Invalid document id: {doc_id!r}")
        return self._collection_dir(collection) / f"{doc_id}.json"

    def _write(self, path: Path, data: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, indent=2, default=str))
        tmp.replace(path)

    def add(self, collection: str, data: dict) -> str:
        doc_id = data.get("id") or new_id()
        self.set(collection, doc_id, data)
        return doc_id

    def get(self, collection: str, doc_id: str) -> dict | None:
        path = self._path_for(collection, doc_id)
        if not path.exists():
            return None
        data = json.loads(path.read_text())
        data["id"] = doc_id
        return data

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        self._write(self._path_for(collection, doc_id), {**data, "id": doc_id})

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        existing = self.get(collection, doc_id)
        if existing is None:
            raise KeyError(f"{collection}/{doc_id}")
        existing.update(data)
        existing["id"] = doc_id
        self._write(self._path_for(collection, doc_id), existing)

    def delete(self, collection: str, doc_id: str) -> None:
        self._path_for(collection, doc_id).unlink(missing_ok=True)

    def _load_all(self, collection: str) -> list[dict]:
        folder = self._collection_dir(collection)
        if not folder.exists():
            return []
        docs = []
        for path in sorted(folder.glob("*.json")):
            try:
                data = json.loads(path.read_text())
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping unreadable document {path}: {e}")
                continue
            data["id"] = path.stem
            docs.append(data)
        return docs

    def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        docs = [
            d for d in self._load_all(collection)
            if all(d.get(field) == value for field, value in filters or [])
        ]
        if not order_by:
            return docs

        # Documents without the ordering field go last in either direction
        present = [d for d in docs if d.get(order_by) is not None]
        missing = [d for d in docs if d.get(order_by) is None]
        present.sort(key=lambda d: d[order_by], reverse=descending)
        return present + missing
