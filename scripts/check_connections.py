#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the relational store and MongoDB are reachable.
Usage: python scripts/check_connections.py
"""
from sqlalchemy.engine import make_url

from placement_portal.core.config import get_settings
from placement_portal.db.mongodb import test_mongo_connection
from placement_portal.db.postgres import test_postgres_connection


def main():
    settings = get_settings()
    print("=" * 50)
    print("PLACEMENT CELL PORTAL - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Checking relational store...")
    print(f"    URL: {make_url(settings.sqlalchemy_url).render_as_string(hide_password=True)}")
    print("    Database: " + ("CONNECTED" if test_postgres_connection() else "FAILED"))

    print("\n[2] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    print("    MongoDB: " + ("CONNECTED" if test_mongo_connection() else "FAILED"))

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
