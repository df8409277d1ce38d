"""Seed the goal catalog: goal types and the fixed wake-up goals.

Re-running is safe, rows are upserted by id.

Usage:
    python scripts/seed_catalog.py --mongodb-url mongodb://localhost:27017
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from daygoals.config import Settings
from daygoals.database import Database
from daygoals.models.goal import WAKE_AT_6, WAKE_AT_8, WAKE_AT_10
from daygoals.models.goal_type import WAKE_TYPE_ID

GOAL_TYPES = [
    {"_id": WAKE_TYPE_ID, "name": "Wake up", "points": 1, "evaluated": False, "from_list": True},
    {"_id": 2, "name": "Sport", "points": 2, "evaluated": True, "from_list": False},
    {"_id": 3, "name": "Self-development", "points": 2, "evaluated": True, "from_list": False},
]

GOALS = [
    {"_id": WAKE_AT_6, "type": WAKE_TYPE_ID, "description": "Wake up at 6:00"},
    {"_id": WAKE_AT_8, "type": WAKE_TYPE_ID, "description": "Wake up at 8:00"},
    {"_id": WAKE_AT_10, "type": WAKE_TYPE_ID, "description": "Wake up at 10:00"},
]


async def seed(db) -> dict:
    """
    Upsert the catalog rows.

    Returns:
        Dictionary with upserted and updated counts per collection
    """
    stats = {}
    for collection_name, rows in (("goal_types", GOAL_TYPES), ("goals", GOALS)):
        stats[collection_name] = {"upserted": 0, "updated": 0}
        for row in rows:
            fields = {k: v for k, v in row.items() if k != "_id"}
            result = await db[collection_name].update_one(
                {"_id": row["_id"]},
                {"$set": fields},
                upsert=True,
            )
            if result.upserted_id is not None:
                stats[collection_name]["upserted"] += 1
            else:
                stats[collection_name]["updated"] += 1
    return stats


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the goal catalog")
    parser.add_argument("--mongodb-url", help="MongoDB connection URL")
    parser.add_argument("--db-name", help="Database name")
    args = parser.parse_args()

    overrides = {}
    if args.mongodb_url:
        overrides["mongodb_url"] = args.mongodb_url
    if args.db_name:
        overrides["mongodb_db_name"] = args.db_name

    database = Database(Settings(**overrides))
    await database.connect()
    try:
        stats = await seed(database.db)
    finally:
        await database.disconnect()

    print("\n=== Seed Summary ===")
    for collection_name, counts in stats.items():
        print(f"{collection_name}: {counts['upserted']} new, {counts['updated']} updated")


if __name__ == "__main__":
    asyncio.run(main())
