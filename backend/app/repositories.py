"""Document store adapter over MongoDB.

Services never touch pymongo directly. They receive a ``DocumentStore``
through their constructor and use its four document operations (plus
``all`` for registry listings). Every driver failure is logged and
re-raised as ``DatabaseError`` so the HTTP layer has one error type to map.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from . import db
from .db import DatabaseError

logger = logging.getLogger(__name__)


class DocumentStore:
    """Minimal key/document interface used by the survey services."""

    def __init__(self, database: Database):
        """Initialize the store with a pymongo database handle.

        Args:
            database: Database holding the survey and locality collections
        """
        self.database = database

    def collection(self, name: str) -> Collection:
        return self.database[name]

    def find(self, collection_name: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """Return every document whose ``field`` (dotted path allowed) equals ``value``."""
        try:
            return list(self.collection(collection_name).find({field: value}))
        except PyMongoError as e:
            logger.error(f"Error finding documents in {collection_name} by {field}: {e}")
            raise DatabaseError(f"Failed to query {collection_name}: {e}") from e

    def get(self, collection_name: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        try:
            return self.collection(collection_name).find_one({'_id': doc_id})
        except PyMongoError as e:
            logger.error(f"Error reading {doc_id!r} from {collection_name}: {e}")
            raise DatabaseError(f"Failed to read from {collection_name}: {e}") from e

    def set(self, collection_name: str, doc_id: Any, document: Dict[str, Any]) -> None:
        """Create or overwrite the document stored under ``doc_id``."""
        body = dict(document)
        body['_id'] = doc_id
        try:
            self.collection(collection_name).replace_one({'_id': doc_id}, body, upsert=True)
        except PyMongoError as e:
            logger.error(f"Error writing {doc_id!r} to {collection_name}: {e}")
            raise DatabaseError(f"Failed to write to {collection_name}: {e}") from e

    def add(self, collection_name: str, document: Dict[str, Any]) -> str:
        """Insert a new document and return its generated id as a string."""
        try:
            # insert_one mutates its argument with the generated _id
            result = self.collection(collection_name).insert_one(dict(document))
            return str(result.inserted_id)
        except PyMongoError as e:
            logger.error(f"Error inserting document in {collection_name}: {e}")
            raise DatabaseError(f"Failed to insert into {collection_name}: {e}") from e

    def all(self, collection_name: str) -> List[Dict[str, Any]]:
        try:
            return list(self.collection(collection_name).find({}))
        except PyMongoError as e:
            logger.error(f"Error listing documents in {collection_name}: {e}")
            raise DatabaseError(f"Failed to list {collection_name}: {e}") from e


def get_store() -> DocumentStore:
    """Build a store bound to the current application's MongoDB database."""
    return DocumentStore(db.get_db())
