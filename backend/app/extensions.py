"""Flask extensions initialization (Limiter, MongoDB, document store wiring).

Services get their ``DocumentStore`` from ``current_store()``. The factory
behind it defaults to the MongoDB-backed store and can be replaced when the
app is created, which is how tests run without a database.
"""
from typing import Callable, Optional

from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from . import db
from .repositories import DocumentStore, get_store

# Default limits come from RATELIMIT_DEFAULT in the app config
limiter = Limiter(
    key_func=get_remote_address,
    headers_enabled=True,
)

StoreFactory = Callable[[], DocumentStore]


def init_extensions(app, store_factory: Optional[StoreFactory] = None):
    """Initialize Flask extensions with app context.

    Args:
        app: Flask application instance
        store_factory: Optional callable returning the DocumentStore to use
    """
    limiter.init_app(app)

    # Initialize MongoDB connection using db module
    db.init_app(app)

    app.extensions['store_factory'] = store_factory or get_store


def current_store() -> DocumentStore:
    """Return the document store for the current request."""
    return current_app.extensions['store_factory']()
