"""Typed request objects for survey submissions.

``SurveySubmission.from_payload`` is the only place a raw JSON body is
inspected. It checks the basic shape and raises ``ValidationError`` with a
readable message; anything past that point works with typed fields.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Number
from typing import Any, Dict, Optional

from backend.app.services.errors import ValidationError

RATING_FIELDS = (
    'cleanliness',
    'waterQuality',
    'airQuality',
    'noiseLevel',
    'roadQuality',
    'affordability',
    'safety',
    'internetQuality',
)
AMENITY_FIELDS = (
    'hospital',
    'groceryStore',
    'vegetableVendor',
    'publicTransport',
    'recreation',
    'schools',
)


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"{where}{key} must be a string")
    return value


def _is_number(value: Any) -> bool:
    if not isinstance(value, Number) or isinstance(value, bool):
        return False
    # the JSON parser accepts NaN and Infinity, which cannot be written back out
    return math.isfinite(value)


def _whole_number(value: Any) -> Optional[int]:
    """Return ``value`` as an int when it is a whole JSON number (29 or 29.0)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _score_map(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    scores = payload.get(key)
    if not isinstance(scores, dict):
        raise ValidationError(f"{key} must be an object")
    for name, value in scores.items():
        if value is not None and not _is_number(value):
            raise ValidationError(f"{key}.{name} must be a number")
    return dict(scores)


@dataclass(frozen=True)
class LocalityInput:
    state: str
    city: str
    area: str
    pincode: str = ''
    # the locality object exactly as it arrived, for the locality registry
    submitted: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, data: Any) -> "LocalityInput":
        if not isinstance(data, dict):
            raise ValidationError("locality must be an object")
        pincode = data.get('pincode')
        if pincode is None:
            pincode = ''
        elif isinstance(pincode, int) and not isinstance(pincode, bool):
            pincode = str(pincode)
        elif not isinstance(pincode, str):
            raise ValidationError("locality.pincode must be a string")
        return cls(
            state=_require_str(data, 'state', 'locality.'),
            city=_require_str(data, 'city', 'locality.'),
            area=_require_str(data, 'area', 'locality.'),
            pincode=pincode,
            submitted=dict(data),
        )

    def to_dict(self) -> Dict[str, str]:
        return {'state': self.state, 'city': self.city, 'area': self.area, 'pincode': self.pincode}


@dataclass(frozen=True)
class SurveySubmission:
    name: str
    age: int
    occupation: str
    locality: LocalityInput
    ratings: Dict[str, Any] = field(default_factory=dict)
    amenities: Dict[str, Any] = field(default_factory=dict)
    comments: str = ''

    @classmethod
    def from_payload(cls, payload: Any) -> "SurveySubmission":
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")

        age = _whole_number(payload.get('age'))
        if age is None:
            raise ValidationError("age must be an integer")

        comments = payload.get('comments')
        if comments is None:
            comments = ''
        elif not isinstance(comments, str):
            raise ValidationError("comments must be a string")

        return cls(
            name=_require_str(payload, 'name', ''),
            age=age,
            occupation=_require_str(payload, 'occupation', ''),
            locality=LocalityInput.from_payload(payload.get('locality')),
            ratings=_score_map(payload, 'ratings'),
            amenities=_score_map(payload, 'amenities'),
            comments=comments,
        )
