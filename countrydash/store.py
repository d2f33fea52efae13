"""A small document store with collections, queries and optional JSON persistence."""

from __future__ import annotations

import copy
import json
import operator
import os
import secrets
import string
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from countrydash.config import ERR_STORE_INIT, ERR_STORE_NOT_INITIALIZED

_ID_ALPHABET = string.ascii_letters + string.digits
_ID_LENGTH = 20
_DATETIME_TAG = "__datetime__"

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class StoreError(Exception):
    """Raised when the document store cannot carry out an operation."""


class StoreNotInitializedError(StoreError):
    """Raised when the global store is used before it has been set up."""


class DocumentNotFoundError(StoreError):
    """Raised when a requested document does not exist."""


def _new_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    raise TypeError(f"cannot store value of type {type(value).__name__}")


def _decode(obj: dict) -> Any:
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def _lookup(data: Mapping, field_path: str) -> tuple[bool, Any]:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return False, None
        current = current[part]
    return True, current


@dataclass(frozen=True)
class DocumentSnapshot:
    """The contents of one document at the moment it was read."""

    ref: DocumentRef
    data: dict[str, Any]

    @property
    def id(self) -> str:
        return self.ref.id

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)


@dataclass(frozen=True)
class DocumentRef:
    """A reference to one document in a collection."""

    store: DocumentStore
    collection: str
    id: str

    def get(self) -> DocumentSnapshot:
        data = self.store._read(self.collection, self.id)
        if data is None:
            raise DocumentNotFoundError(f"document {self.collection}/{self.id} not found")
        return DocumentSnapshot(ref=self, data=data)

    def set(self, data: Mapping[str, Any]) -> None:
        self.store._write(self.collection, self.id, dict(data))

    def delete(self) -> None:
        """Remove the document; removing a missing document is not an error."""
        self.store._remove(self.collection, self.id)


@dataclass(frozen=True)
class CollectionRef:
    """A collection, optionally narrowed by field filters."""

    store: DocumentStore
    name: str
    filters: tuple[tuple[str, str, Any], ...] = ()

    def add(self, data: Mapping[str, Any]) -> DocumentRef:
        ref = self.store._insert(self.name, dict(data))
        return ref

    def document(self, doc_id: str) -> DocumentRef:
        if not doc_id:
            raise StoreError("document ID must not be empty")
        return DocumentRef(store=self.store, collection=self.name, id=doc_id)

    def where(self, field: str, op: str, value: Any) -> CollectionRef:
        if op not in _OPERATORS:
            raise ValueError(f"unsupported query operator: {op!r}")
        return CollectionRef(self.store, self.name, self.filters + ((field, op, value),))

    def stream(self) -> Iterator[DocumentSnapshot]:
        for doc_id, data in self.store._documents(self.name):
            if self._matches(data):
                ref = DocumentRef(store=self.store, collection=self.name, id=doc_id)
                yield DocumentSnapshot(ref=ref, data=data)

    def _matches(self, data: Mapping[str, Any]) -> bool:
        for field_path, op, expected in self.filters:
            found, actual = _lookup(data, field_path)
            if not found:
                return False
            try:
                if not _OPERATORS[op](actual, expected):
                    return False
            except TypeError:
                return False
        return True


class DocumentStore:
    """Thread-safe collections of JSON-like documents, kept in a file when a path is given."""

    def __init__(self, path: str | os.PathLike | None = None) -> None:
        self._path = Path(path) if path else None
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._closed = False
        if self._path is not None and self._path.exists():
            self._load()

    def __enter__(self) -> DocumentStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def collection(self, name: str) -> CollectionRef:
        if not name:
            raise StoreError("collection name must not be empty")
        return CollectionRef(store=self, name=name)

    def collections(self) -> list[str]:
        """Names of the collections that hold at least one document."""
        with self._lock:
            self._check_open()
            return sorted(name for name, docs in self._collections.items() if docs)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._persist()
            self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("document store is closed")

    def _load(self) -> None:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"), object_hook=_decode)
        except (OSError, ValueError) as exc:
            raise StoreError(f"cannot read {self._path}: {exc}") from exc
        if not isinstance(raw, dict) or not all(
            isinstance(docs, dict) for docs in raw.values()
        ):
            raise StoreError(f"malformed data file: {self._path}")
        self._collections = raw

    def _persist(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temporary = self._path.with_name(self._path.name + ".tmp")
            temporary.write_text(
                json.dumps(self._collections, default=_encode, indent=2), encoding="utf-8"
            )
            os.replace(temporary, self._path)
        except (OSError, TypeError) as exc:
            raise StoreError(f"cannot write {self._path}: {exc}") from exc

    def _read(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            self._check_open()
            data = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._check_open()
            self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
            self._persist()

    def _insert(self, collection: str, data: dict[str, Any]) -> DocumentRef:
        with self._lock:
            self._check_open()
            docs = self._collections.setdefault(collection, {})
            doc_id = _new_id()
            while doc_id in docs:
                doc_id = _new_id()
            docs[doc_id] = copy.deepcopy(data)
            self._persist()
            return DocumentRef(store=self, collection=collection, id=doc_id)

    def _remove(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._check_open()
            docs = self._collections.get(collection)
            if docs is not None and docs.pop(doc_id, None) is not None:
                self._persist()

    def _documents(self, collection: str) -> list[tuple[str, dict[str, Any]]]:
        with self._lock:
            self._check_open()
            return [
                (doc_id, copy.deepcopy(data))
                for doc_id, data in self._collections.get(collection, {}).items()
            ]


_client: DocumentStore | None = None


def set_client(client: DocumentStore | None) -> None:
    """Replace the global store."""
    global _client
    _client = client


def get_client() -> DocumentStore | None:
    """Return the global store, or None if none is set."""
    return _client


def init_store(path: str | os.PathLike | None) -> DocumentStore:
    """Open the store kept at ``path`` and make it the global store."""
    try:
        store = DocumentStore(path)
    except StoreError as exc:
        raise StoreError(ERR_STORE_INIT.format(exc)) from exc
    set_client(store)
    return store


def firestore_client() -> DocumentStore:
    """Return the global store, raising if it has not been set up."""
    if _client is None:
        raise StoreNotInitializedError(ERR_STORE_NOT_INITIALIZED)
    return _client


def close_store() -> None:
    """Close the global store if there is one."""
    if _client is not None:
        _client.close()


def is_initialized() -> bool:
    return _client is not None