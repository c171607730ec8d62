"""Surveys blueprint: survey submission and locality statistics.

Routes:
- POST /api/surveys/add
- GET /api/surveys/getData?locality=<term>
- GET /api/surveys/getRatingsOverTime?locality=<term>
"""
from __future__ import annotations

import logging
from flask import Blueprint, current_app, jsonify, request

from backend.app.db import DatabaseError
from backend.app.extensions import current_store, limiter
from backend.app.services.errors import SurveyServiceError
from backend.app.services.surveys.aggregation_service import SurveyAggregationService
from backend.app.services.surveys.ingestion_service import SurveyIngestionService

logger = logging.getLogger(__name__)

surveys_bp = Blueprint('surveys', __name__)

MISSING_LOCALITY_MESSAGE = 'locality query parameter is required'


def _workers() -> int:
    return current_app.config.get('SURVEY_LOOKUP_WORKERS', 4)


def _server_error(error: Exception):
    return jsonify({'success': False, 'error': str(error)}), 500


@surveys_bp.route('/add', methods=['POST'])
@limiter.limit(lambda: current_app.config.get('SURVEY_SUBMIT_RATE_LIMIT', '30 per hour'))
def add_survey():
    """Store a survey submission.

    Expected JSON body:
    {
        "name": "Asha",
        "age": 29,
        "occupation": "Engineer",
        "locality": {"state": "Karnataka", "city": "Bengaluru", "area": "Indiranagar", "pincode": "560038"},
        "ratings": {"cleanliness": 4, "waterQuality": 3, ...},
        "amenities": {"hospital": 5, "groceryStore": 4, ...},
        "comments": "Quiet streets"
    }
    """
    payload = request.get_json(silent=True)
    try:
        service = SurveyIngestionService(current_store(), max_workers=_workers())
        service.submit(payload)
        return jsonify({'success': True}), 201
    except SurveyServiceError as e:
        return jsonify({'success': False, 'error': e.message}), e.status
    except DatabaseError as e:
        logger.error(f"Add survey failed: {e}")
        return _server_error(e)
    except Exception as e:
        logger.exception('Unexpected error adding survey')
        return _server_error(e)


@surveys_bp.route('/getData', methods=['GET'])
def get_survey_stats_by_locality():
    """Aggregated ratings, amenities, demographics and comments for a locality.

    Query parameters:
    - locality: state, city, area or pincode to match (case-insensitive)
    """
    locality = request.args.get('locality')
    if not locality:
        return jsonify({'error': MISSING_LOCALITY_MESSAGE}), 400

    try:
        service = SurveyAggregationService(current_store(), max_workers=_workers())
        stats = service.get_survey_stats_by_locality(locality)
        return jsonify({'success': True, 'stats': stats}), 200
    except SurveyServiceError as e:
        return jsonify({'error': e.message}), e.status
    except DatabaseError as e:
        logger.error(f"Get survey stats failed for {locality!r}: {e}")
        return _server_error(e)
    except Exception as e:
        logger.exception('Unexpected error aggregating survey stats')
        return _server_error(e)


@surveys_bp.route('/getRatingsOverTime', methods=['GET'])
def get_ratings_over_time():
    """Daily average cleanliness, air quality, water quality and noise ratings.

    Returns a bare JSON array sorted by date, or {"success": true, "data": []}
    when no survey matches.
    """
    locality = request.args.get('locality')
    if not locality:
        return jsonify({'error': MISSING_LOCALITY_MESSAGE}), 400

    try:
        service = SurveyAggregationService(current_store(), max_workers=_workers())
        series = service.get_ratings_over_time(locality)
        if not series:
            return jsonify({'success': True, 'data': []}), 200
        return jsonify(series), 200
    except SurveyServiceError as e:
        return jsonify({'error': e.message}), e.status
    except DatabaseError as e:
        logger.error(f"Get ratings over time failed for {locality!r}: {e}")
        return _server_error(e)
    except Exception as e:
        logger.exception('Unexpected error computing ratings over time')
        return _server_error(e)
