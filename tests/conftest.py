"""Shared fixtures: an in-memory document store and a Flask app wired to it."""
from __future__ import annotations

import copy
import itertools
import threading
from typing import Any, Dict, List, Optional

import pytest

from backend.app import create_app
from backend.app.config import TestingConfig
from backend.app.db import DatabaseError


class InMemoryStore:
    """Dict-backed stand-in for ``DocumentStore`` with the same five operations."""

    def __init__(self) -> None:
        self.collections: Dict[str, Dict[Any, Dict[str, Any]]] = {}
        self.fail_on: set = set()
        self.calls: List[tuple] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _collection(self, name: str) -> Dict[Any, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def _record(self, op: str, collection_name: str) -> None:
        with self._lock:
            self.calls.append((op, collection_name))
        if op in self.fail_on or (op, collection_name) in self.fail_on:
            raise DatabaseError(f"{op} on {collection_name} failed")

    @staticmethod
    def _lookup(doc: Dict[str, Any], path: str) -> Any:
        value: Any = doc
        for part in path.split('.'):
            if not isinstance(value, dict):
                return None
            value = value.get(part)
        return value

    def find(self, collection_name: str, field: str, value: Any) -> List[Dict[str, Any]]:
        self._record('find', collection_name)
        with self._lock:
            docs = list(self._collection(collection_name).values())
        return [copy.deepcopy(d) for d in docs if self._lookup(d, field) == value]

    def get(self, collection_name: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        self._record('get', collection_name)
        with self._lock:
            doc = self._collection(collection_name).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection_name: str, doc_id: Any, document: Dict[str, Any]) -> None:
        self._record('set', collection_name)
        body = copy.deepcopy(document)
        body['_id'] = doc_id
        with self._lock:
            self._collection(collection_name)[doc_id] = body

    def add(self, collection_name: str, document: Dict[str, Any]) -> str:
        self._record('add', collection_name)
        with self._lock:
            doc_id = f"doc-{next(self._ids)}"
            body = copy.deepcopy(document)
            body['_id'] = doc_id
            self._collection(collection_name)[doc_id] = body
        return doc_id

    def all(self, collection_name: str) -> List[Dict[str, Any]]:
        self._record('all', collection_name)
        with self._lock:
            return [copy.deepcopy(d) for d in self._collection(collection_name).values()]

    def docs(self, collection_name: str) -> List[Dict[str, Any]]:
        """Direct access for assertions; not part of the store interface."""
        return list(self._collection(collection_name).values())


def make_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        'name': 'Asha',
        'age': 29,
        'occupation': 'Engineer',
        'locality': {'state': 'Karnataka', 'city': 'Bengaluru', 'area': 'Indiranagar', 'pincode': '560038'},
        'ratings': {
            'cleanliness': 4, 'waterQuality': 3, 'airQuality': 3, 'noiseLevel': 2,
            'roadQuality': 3, 'affordability': 2, 'safety': 4, 'internetQuality': 5,
        },
        'amenities': {
            'hospital': 4, 'groceryStore': 5, 'vegetableVendor': 5,
            'publicTransport': 3, 'recreation': 2, 'schools': 4,
        },
        'comments': '  Good parks  ',
    }
    payload.update(overrides)
    return payload


@pytest.fixture(name="store")
def fixture_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture(name="app")
def fixture_app(store: InMemoryStore):
    return create_app(TestingConfig, store_factory=lambda: store)


@pytest.fixture(name="client")
def fixture_client(app):
    return app.test_client()


@pytest.fixture(name="payload_factory")
def fixture_payload_factory():
    return make_payload
