#!/usr/bin/env python3
"""
Database reset script for the Slot Booking backend.

This script clears all data and reinitializes a local SQLite database with
empty tables, optionally seeding one demo business open Monday to Friday.
Use this to get a clean database state for manual testing.
"""

import sys
import os

# Add backend/src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'backend', 'src'))

from datetime import time

from sqlalchemy import inspect

from core.config import DATABASE_URL
from core.database import engine, create_tables, drop_tables, get_db_context
from models import Business
from services.operating_hours_service import OperatingHoursService
from services.scheduling_types import OperatingHoursEntry


EXPECTED_TABLES = [
    'businesses', 'business_operating_hours', 'appointment_time_slots',
    'daily_slot_availability', 'business_availability', 'appointments',
]


def reset_database(seed_owner_id=None):
    """Reset the database by dropping all tables and recreating them."""

    print("🔄 Resetting Slot Booking database...")
    print(f"Database URL: {DATABASE_URL}")

    # Confirm action (in case someone runs this accidentally)
    if not str(DATABASE_URL).startswith('sqlite'):
        print("❌ ERROR: This script only works with a local SQLite database!")
        print(f"Current database: {DATABASE_URL}")
        return

    drop_tables()
    print("🗑️  Existing tables dropped")

    print("🏗️  Creating fresh tables...")
    create_tables()

    table_names = inspect(engine).get_table_names()
    print("📋 Created tables:")
    for table in EXPECTED_TABLES:
        if table in table_names:
            print(f"   ✅ {table}")
        else:
            print(f"   ❌ {table} (missing)")

    if not all(table in table_names for table in EXPECTED_TABLES):
        print("⚠️  Warning: Some tables may be missing")
        return

    if seed_owner_id:
        with get_db_context() as db:
            business = Business(owner_id=seed_owner_id, name="Demo Business")
            db.add(business)
            db.flush()
            business_id = business.id
        with get_db_context() as db:
            entries = [
                OperatingHoursEntry(day_of_week=day, open_time=time(9, 0), close_time=time(17, 0))
                for day in range(1, 6)
            ] + [
                OperatingHoursEntry(day_of_week=day, is_closed=True) for day in (0, 6)
            ]
            OperatingHoursService.upsert_operating_hours(db, business_id, entries)
        print(f"🌱 Seeded business {business_id} for owner '{seed_owner_id}' (Mon-Fri 09:00-17:00)")

    print("🎉 Database reset complete!")


def show_usage():
    """Show usage information."""
    print("Slot Booking Database Reset Script")
    print("=" * 40)
    print()
    print("This script will:")
    print("1. Drop all existing tables")
    print("2. Recreate all tables with empty data")
    print("3. Optionally seed a demo business for the given owner id")
    print()
    print("Usage:")
    print("  DATABASE_URL=sqlite:///./dev.db python reset_database.py [--seed OWNER_ID]")
    print()
    print("Note: Only works with a SQLite database")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] in ['--help', '-h']:
        show_usage()
    elif len(sys.argv) > 2 and sys.argv[1] == '--seed':
        reset_database(seed_owner_id=sys.argv[2])
    else:
        reset_database()
