"""Survey submission: validate, normalize, persist, then update the registry.

The survey insert and the registry writes are separate store calls with no
transaction around them. A failure part way through leaves the earlier
writes in place and propagates to the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from backend.app.repositories import DocumentStore
from backend.app.services.concurrency import DEFAULT_MAX_WORKERS
from backend.app.services.localities.normalizer import normalize_locality
from backend.app.services.localities.registry_service import LocalityRegistry
from backend.app.services.surveys.schemas import SurveySubmission

logger = logging.getLogger(__name__)

SURVEYS_COLLECTION = 'surveys'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyIngestionService:
    def __init__(
        self,
        store: DocumentStore,
        registry: Optional[LocalityRegistry] = None,
        clock: Callable[[], datetime] = _utcnow,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.store = store
        self.registry = registry or LocalityRegistry(store, max_workers=max_workers)
        self.clock = clock

    def submit(self, payload: Any) -> str:
        """Store one survey submission and return the new survey id.

        Raises:
            ValidationError: the payload does not have the expected shape
            DatabaseError: any store write failed
        """
        submission = SurveySubmission.from_payload(payload)
        normalized = normalize_locality(submission.locality.to_dict())

        survey_id = self.store.add(SURVEYS_COLLECTION, {
            'name': submission.name,
            'age': submission.age,
            'occupation': submission.occupation,
            'locality': normalized,
            'ratings': submission.ratings,
            'amenities': submission.amenities,
            'comments': submission.comments,
            'createdAt': self.clock(),
        })

        self.registry.register_locality(submission.locality.submitted)
        self.registry.register_fields(normalized)

        logger.info("Stored survey %s for %s/%s/%s", survey_id, normalized['state'], normalized['city'], normalized['area'])
        return survey_id
