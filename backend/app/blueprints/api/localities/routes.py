"""Localities blueprint: distinct known states, cities, areas and pincodes."""
from __future__ import annotations

import logging
from flask import Blueprint, jsonify

from backend.app.extensions import current_store
from backend.app.services.localities.normalizer import capitalize_array
from backend.app.services.localities.registry_service import CATEGORY_COLLECTIONS, LocalityRegistry

logger = logging.getLogger(__name__)

localities_bp = Blueprint('localities', __name__)


def _list_category(category: str, capitalize: bool = True):
    try:
        values = LocalityRegistry(current_store()).list_distinct_values(CATEGORY_COLLECTIONS[category])
        return jsonify(capitalize_array(values) if capitalize else values), 200
    except Exception as e:
        logger.exception('Failed to list locality %s', category)
        return jsonify({'success': False, 'error': str(e)}), 500


@localities_bp.route('/states', methods=['GET'])
def get_states():
    return _list_category('states')


@localities_bp.route('/cities', methods=['GET'])
def get_cities():
    return _list_category('cities')


@localities_bp.route('/areas', methods=['GET'])
def get_areas():
    return _list_category('areas')


@localities_bp.route('/pincodes', methods=['GET'])
def get_pincodes():
    # Pincodes are returned exactly as registered
    return _list_category('pincodes', capitalize=False)
