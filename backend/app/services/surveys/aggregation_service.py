"""Aggregated survey statistics for a locality search term.

A search term may be a state, city, area or pincode, and the store has no
multi-field OR query. The lookup therefore runs one equality query per
locality field, concurrently, and merges the results by survey ``_id`` so a
survey matching on several fields is counted once. Against a store that
supports OR queries this collapses to a single query.
"""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from backend.app.repositories import DocumentStore
from backend.app.services.concurrency import DEFAULT_MAX_WORKERS, run_concurrently
from backend.app.services.errors import ValidationError
from backend.app.services.surveys.schemas import AMENITY_FIELDS, RATING_FIELDS

logger = logging.getLogger(__name__)

SURVEYS_COLLECTION = 'surveys'
LOCALITY_SEARCH_FIELDS = ('state', 'city', 'area', 'pincode')
TIME_SERIES_FIELDS = ('cleanliness', 'airQuality', 'waterQuality', 'noiseLevel')


def get_age_group(age: int) -> str:
    if age < 18:
        return 'Under 18'
    if age <= 25:
        return '18-25'
    if age <= 35:
        return '26-35'
    if age <= 50:
        return '36-50'
    return '50+'


def _score(scores: Optional[Dict[str, Any]], name: str) -> float:
    if not scores:
        return 0
    return scores.get(name) or 0


def _day_key(created_at: Any) -> Optional[str]:
    """UTC calendar day (YYYY-MM-DD) of a stored ``createdAt`` value, or None if unset."""
    if created_at is None:
        return None
    if isinstance(created_at, datetime):
        # pymongo returns naive datetimes that are already UTC
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc)
        return created_at.date().isoformat()
    return str(created_at)[:10]


class SurveyAggregationService:
    def __init__(self, store: DocumentStore, max_workers: int = DEFAULT_MAX_WORKERS):
        self.store = store
        self.max_workers = max_workers

    def find_surveys_by_locality(self, term: Any) -> List[Dict[str, Any]]:
        """Return the de-duplicated surveys whose locality matches ``term`` on any field."""
        if not term:
            raise ValidationError('locality query parameter is required')
        needle = str(term).lower()

        calls = [
            (lambda f=field: self.store.find(SURVEYS_COLLECTION, f'locality.{f}', needle))
            for field in LOCALITY_SEARCH_FIELDS
        ]
        results = run_concurrently(calls, self.max_workers)

        merged: Dict[Any, Dict[str, Any]] = {}
        for docs in results:
            for doc in docs:
                merged.setdefault(doc['_id'], doc)

        logger.debug(
            "Locality %r matched %s surveys (%s before de-dup)",
            needle, len(merged), sum(len(docs) for docs in results),
        )
        return list(merged.values())

    def get_survey_stats_by_locality(self, term: Any) -> Optional[Dict[str, Any]]:
        """Averages and distributions for a locality, or None when nothing matches."""
        surveys = self.find_surveys_by_locality(term)
        if not surveys:
            return None

        ratings_sum = dict.fromkeys(RATING_FIELDS, 0)
        amenities_sum = dict.fromkeys(AMENITY_FIELDS, 0)
        age_distribution: Counter = Counter()
        occupation_distribution: Counter = Counter()
        comments: List[str] = []
        count = 0

        for survey in surveys:
            ratings = survey.get('ratings')
            for name in RATING_FIELDS:
                ratings_sum[name] += _score(ratings, name)

            amenities = survey.get('amenities')
            for name in AMENITY_FIELDS:
                amenities_sum[name] += _score(amenities, name)

            age_distribution[get_age_group(survey['age'])] += 1
            occupation_distribution[str(survey['occupation']).lower()] += 1
            count += 1

            comment = survey.get('comments')
            if isinstance(comment, str) and comment.strip():
                comments.append(comment.strip())

        return {
            'ratingsAvg': {name: total / count for name, total in ratings_sum.items()},
            'amenitiesAvg': {name: total / count for name, total in amenities_sum.items()},
            'ageDistribution': dict(age_distribution),
            'occupationDistribution': dict(occupation_distribution),
            'comments': comments,
        }

    def get_ratings_over_time(self, term: Any) -> List[Dict[str, Any]]:
        """Daily averages of the headline ratings, oldest day first."""
        surveys = self.find_surveys_by_locality(term)

        daily: Dict[str, Dict[str, float]] = defaultdict(lambda: dict.fromkeys(TIME_SERIES_FIELDS + ('count',), 0))
        for survey in surveys:
            day = _day_key(survey.get('createdAt'))
            if day is None:
                logger.warning("Survey %s has no createdAt, left out of the time series", survey.get('_id'))
                continue
            entry = daily[day]
            ratings = survey.get('ratings')
            for name in TIME_SERIES_FIELDS:
                entry[name] += _score(ratings, name)
            entry['count'] += 1

        series = []
        for date in sorted(daily):
            entry = daily[date]
            point = {'date': date}
            point.update({name: entry[name] / entry['count'] for name in TIME_SERIES_FIELDS})
            series.append(point)
        return series
