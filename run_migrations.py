#!/usr/bin/env python
"""
Apply Alembic migrations and seed the default categories
"""

import asyncio
import subprocess
import sys
import os


async def seed_categories():
    from app.db.session import async_session, engine
    from app.services.category import ensure_default_categories

    async with async_session() as db:
        created = await ensure_default_categories(db)
    await engine.dispose()
    return created


def run_migrations():
    """Run alembic upgrade, then make sure system categories exist"""

    # Load environment from .env if exists
    if os.path.exists('.env'):
        from dotenv import load_dotenv
        load_dotenv()

    try:
        print("Applying migrations...")
        subprocess.run(
            ['alembic', 'upgrade', 'head'],
            check=True
        )

        created = asyncio.run(seed_categories())
        print(f"Seeded {created} default categories")

        print("✅ Migrations completed successfully!")
        return 0

    except subprocess.CalledProcessError as e:
        print(f"❌ Migration failed with error: {e}")
        return 1
    except FileNotFoundError:
        print("❌ Alembic not found. Install with: pip install alembic")
        return 1

if __name__ == "__main__":
    sys.exit(run_migrations())
