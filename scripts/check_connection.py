#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the MongoDB connection and index setup.
Usage: python scripts/check_connection.py
"""
import sys
sys.path.insert(0, '.')

from guidancehub.db.mongodb import get_mongo_db, init_mongo_indexes, test_mongo_connection
from guidancehub.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("GUIDANCEHUB - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if not test_mongo_connection():
        print("    ❌ MongoDB: FAILED")
        sys.exit(1)
    print("    ✅ MongoDB: CONNECTED")

    print("\n[2] Creating indexes...")
    init_mongo_indexes()
    print("    ✅ Indexes ready")

    print("\n[3] Collections:")
    for name in sorted(get_mongo_db().list_collection_names()):
        print(f"    - {name}")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
