# scripts/create_indexes.py
"""
Create MongoDB indexes for the locality survey collections.

One single-field index per locality field backs the per-field survey
lookups, plus a createdAt index for the daily rating series.

The script is idempotent - safe to run multiple times.

Usage:
    python scripts/create_indexes.py [--mongo-uri URI] [--mongo-db NAME]

Requires:
    MONGO_URI, MONGO_DB environment variables (loaded from .env file)
    unless given on the command line
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from pymongo import MongoClient
from pymongo.database import Database
from dotenv import load_dotenv

# Add project root to path so the backend package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from backend.app.db import SURVEYS_COLLECTION, create_survey_indexes

# Load environment variables from .env file
load_dotenv()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create indexes for the survey collections.")
    parser.add_argument("--mongo-uri", help="Override MONGO_URI environment variable")
    parser.add_argument("--mongo-db", help="Override MONGO_DB environment variable")
    return parser.parse_args(argv)


def get_db(mongo_uri: Optional[str], mongo_db: Optional[str]) -> Database:
    mongo_uri = mongo_uri or os.environ.get('MONGO_URI')
    mongo_db = mongo_db or os.environ.get('MONGO_DB')
    if not mongo_uri or not mongo_db:
        raise ValueError("MONGO_URI and MONGO_DB environment variables must be set")
    client = MongoClient(mongo_uri)
    return client[mongo_db]


def create_indexes(argv: Optional[List[str]] = None):
    """Create all required database indexes."""
    args = parse_args(argv)
    db = get_db(args.mongo_uri, args.mongo_db)

    print(f"[INDEXES] {SURVEYS_COLLECTION} collection")
    create_survey_indexes(db)
    for name in sorted(db[SURVEYS_COLLECTION].index_information()):
        print(f"  ✓ {name}")

    print("[SUCCESS] All indexes created successfully!")


if __name__ == "__main__":
    create_indexes()
