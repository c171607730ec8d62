"""MongoDB client lifecycle, health check and index setup.

Each application owns one ``MongoClient``, kept in
``app.extensions['mongo_client']``. The client is thread-safe and pools its
own connections, so requests and the lookup threads they start all share it.
It is closed once, when the process exits.
"""

from __future__ import annotations

import atexit
import logging
import threading
from typing import Optional

from flask import Flask, current_app
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

SURVEYS_COLLECTION = 'surveys'
LOCALITY_FIELDS = ('state', 'city', 'area', 'pincode')
CLIENT_KEY = 'mongo_client'

_client_lock = threading.Lock()


class DatabaseError(Exception):
    """Custom exception for database-related errors."""
    pass


def _create_client(app: Flask) -> MongoClient:
    # connect=False: no network I/O until the first operation
    return MongoClient(
        app.config['MONGO_URI'],
        serverSelectionTimeoutMS=app.config.get('MONGO_SERVER_SELECTION_TIMEOUT_MS', 5000),
        connectTimeoutMS=10000,
        socketTimeoutMS=20000,
        maxPoolSize=app.config.get('MONGO_MAX_POOL_SIZE', 50),
        retryWrites=True,
        connect=False,
    )


def get_mongo_client(app: Optional[Flask] = None) -> MongoClient:
    """Return the application's shared client, creating it on first use.

    Raises:
        DatabaseError: If the client cannot be configured (e.g. a malformed URI)
    """
    if app is None:
        app = current_app._get_current_object()

    client = app.extensions.get(CLIENT_KEY)
    if client is not None:
        return client

    with _client_lock:
        client = app.extensions.get(CLIENT_KEY)
        if client is None:
            try:
                client = _create_client(app)
            except PyMongoError as e:
                logger.error(f"Failed to configure MongoDB client: {e}")
                raise DatabaseError(f"Database connection failed: {e}") from e
            app.extensions[CLIENT_KEY] = client
            atexit.register(close_db, app)
            logger.info("MongoDB client created")
    return client


def get_db(app: Optional[Flask] = None) -> Database:
    """Get the configured database on the shared client.

    Raises:
        DatabaseError: If the client cannot be configured
    """
    if app is None:
        app = current_app._get_current_object()
    return get_mongo_client(app)[app.config['MONGO_DB']]


def close_db(app: Flask) -> None:
    """Close the application's client if one was created."""
    client = app.extensions.pop(CLIENT_KEY, None)
    if client is None:
        return
    try:
        client.close()
        logger.debug("MongoDB client closed")
    except PyMongoError as e:
        logger.error(f"Error closing MongoDB client: {e}")


def init_app(app: Flask) -> None:
    """Create the shared client and check that MongoDB answers.

    The app still starts when the ping fails; requests will report the
    outage as database errors until MongoDB is reachable.
    """
    if app.testing:
        return

    try:
        get_mongo_client(app).admin.command('ping')
        logger.info("MongoDB connection established successfully")
    except (DatabaseError, PyMongoError) as e:
        logger.error(f"Database initialization failed: {e}")


def health_check() -> dict:
    """Perform database health check.

    Returns:
        dict: Health check results with status and details
    """
    try:
        client = get_mongo_client()
        client.admin.command('ping')
        server_info = client.server_info()

        return {
            'status': 'healthy',
            'database': current_app.config['MONGO_DB'],
            'server_version': server_info.get('version', 'unknown'),
            'message': 'Database connection is operational'
        }

    except DatabaseError as e:
        return {
            'status': 'unhealthy',
            'error': str(e),
            'message': 'Database connection failed'
        }
    except PyMongoError as e:
        logger.error(f"Health check failed: {e}")
        return {
            'status': 'unhealthy',
            'error': str(e),
            'message': 'Database health check failed'
        }


def create_survey_indexes(database) -> None:
    """Create the lookup indexes used by the locality fan-out search.

    Each locality field is queried on its own, so every field gets a
    single-field index rather than one compound index.
    """
    surveys = database[SURVEYS_COLLECTION]
    for field in LOCALITY_FIELDS:
        surveys.create_index([(f'locality.{field}', ASCENDING)], name=f'idx_locality_{field}')
    surveys.create_index([('createdAt', DESCENDING)], name='idx_created_at')


def ensure_indexes() -> bool:
    """Create the survey indexes; False when MongoDB is unavailable."""
    try:
        create_survey_indexes(get_db())
        logger.info("Database indexes created/verified successfully")
        return True

    except (DatabaseError, PyMongoError) as e:
        logger.error(f"Failed to create indexes: {e}")
        return False
