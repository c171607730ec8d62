"""WSGI entrypoint for development and production (project root).

This file creates the Flask application by calling create_app() from
the `backend.app` package. The configuration is picked from APP_ENV
(development, production or testing).

Usage examples:
  - Development: python -m flask --app wsgi:app run --debug
  - Gunicorn:   gunicorn -c gunicorn.conf.py wsgi:app
"""
import os

from dotenv import load_dotenv
from backend.app import create_app
from backend.app.config import config

# Load environment variables from .env (if present)
load_dotenv()

# Create the Flask application
app = create_app(config.get(os.environ.get('APP_ENV', 'default'), config['default']))

if __name__ == '__main__':
    # Run development server when executed directly
    app.run(debug=True)
