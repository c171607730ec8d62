"""Locality registry: deduplicated sets of known states, cities, areas and pincodes.

Each category is its own collection. Entries are keyed by the slug of the
normalized value and hold ``{"value": <normalized value>}``, so registering
the same value twice lands on the same document.

Inserts are check-then-set without compare-and-swap. Two concurrent
submissions of a new value may both write it; they write the same id and
body, so the registry converges to one entry (last write wins).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from backend.app.repositories import DocumentStore
from backend.app.services.concurrency import DEFAULT_MAX_WORKERS, run_concurrently
from backend.app.services.localities.normalizer import build_locality_id, slugify_value

logger = logging.getLogger(__name__)

LOCALITIES_COLLECTION = 'localities'
CATEGORY_COLLECTIONS = {
    'states': 'localities_states',
    'cities': 'localities_cities',
    'areas': 'localities_areas',
    'pincodes': 'localities_pincodes',
}
# normalized locality field -> registry collection
FIELD_COLLECTIONS = {
    'state': CATEGORY_COLLECTIONS['states'],
    'city': CATEGORY_COLLECTIONS['cities'],
    'area': CATEGORY_COLLECTIONS['areas'],
    'pincode': CATEGORY_COLLECTIONS['pincodes'],
}


class LocalityRegistry:
    def __init__(self, store: DocumentStore, max_workers: int = DEFAULT_MAX_WORKERS):
        self.store = store
        self.max_workers = max_workers

    def register_if_absent(self, collection_name: str, value: Any) -> Optional[str]:
        """Insert ``value`` into a registry collection unless it is already there.

        Returns the entry id, or None when ``value`` is empty.
        """
        if not value:
            return None
        normalized = str(value).lower().strip()
        doc_id = slugify_value(normalized)
        if self.store.get(collection_name, doc_id) is None:
            self.store.set(collection_name, doc_id, {'value': normalized})
            logger.debug("Registered %r in %s", normalized, collection_name)
        return doc_id

    def register_locality(self, raw_locality: Dict[str, Any]) -> str:
        """Store the submitted locality as-is under its raw hyphenated id, once."""
        locality_id = build_locality_id(raw_locality)
        if self.store.get(LOCALITIES_COLLECTION, locality_id) is None:
            self.store.set(LOCALITIES_COLLECTION, locality_id, dict(raw_locality))
            logger.debug("Registered locality %r", locality_id)
        return locality_id

    def register_fields(self, normalized_locality: Dict[str, Any]) -> None:
        """Register each normalized field in its category, concurrently.

        An empty pincode is skipped by ``register_if_absent``.
        """
        calls = [
            (lambda c=collection_name, v=normalized_locality.get(field): self.register_if_absent(c, v))
            for field, collection_name in FIELD_COLLECTIONS.items()
        ]
        run_concurrently(calls, self.max_workers)

    def list_distinct_values(self, collection_name: str) -> List[str]:
        values = set()
        for doc in self.store.all(collection_name):
            value = doc.get('value')
            if value:
                values.add(value)
        return sorted(values)
