#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the store, the mirror and the gateway key.
Usage: python scripts/test_connections.py
"""

from gigconnect.core.config import get_settings
from gigconnect.db.mongodb import test_mongo_connection
from gigconnect.db.postgres import test_postgres_connection
from gigconnect.services.paystack_client import get_paystack_client


def main():
    settings = get_settings()
    print("=" * 50)
    print("GIGCONNECT - CONNECTION TEST")
    print("=" * 50)

    # Test MongoDB
    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # Test PostgreSQL (only if a host is set)
    print("\n[2] Testing PostgreSQL mirror...")
    if settings.remote_sync_enabled:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
        if test_postgres_connection():
            print("    ✅ PostgreSQL: CONNECTED")
        else:
            print("    ❌ PostgreSQL: FAILED")
    else:
        print("    ⚠️  PostgreSQL: POSTGRES_HOST not set (mirror disabled)")

    # Paystack key (no network call)
    print("\n[3] Checking Paystack...")
    if get_paystack_client().is_configured():
        print(f"    Base URL: {settings.paystack_base_url}")
        print("    ✅ Paystack: KEY CONFIGURED")
    else:
        print("    ⚠️  Paystack: secret key not configured")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
