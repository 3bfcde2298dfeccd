#!/usr/bin/env python3
"""Setup script for the auto detailing booking API."""

import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from autodetail.core.config import settings
from autodetail.core.database import async_session_factory, close_db
from autodetail.models import *  # Import all models to ensure they're registered

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def setup_database():
    """Bring the schema up to the latest migration."""
    logger.info("Setting up database...")

    try:
        alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

        logger.info("Running database migrations...")
        # env.py runs its own event loop
        await asyncio.to_thread(command.upgrade, alembic_cfg, "head")
        logger.info("Database migrations completed")

    except Exception as e:
        logger.error(f"Database setup failed: {e}")
        raise


async def create_sample_data():
    """Seed the catalog and the deposit setting on an empty database."""
    from autodetail.models.setting import DEPOSIT_PERCENTAGE_KEY

    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing = await db.execute(select(func.count()).select_from(Service))
            if existing.scalar_one() > 0:
                logger.info("Sample data already exists, skipping...")
                return

            db.add_all([
                Service(
                    name="Express Wash",
                    description="Hand wash, wheels and tire shine",
                    sedan_price=Decimal("60.00"),
                    suv_price=Decimal("75.00"),
                    truck_price=Decimal("90.00"),
                    duration_minutes=60,
                    features=["Hand wash", "Wheel cleaning", "Tire shine"],
                    display_order=1,
                ),
                Service(
                    name="Full Detail",
                    description="Complete interior and exterior detail",
                    sedan_price=Decimal("150.00"),
                    suv_price=Decimal("180.00"),
                    truck_price=Decimal("220.00"),
                    duration_minutes=240,
                    features=["Hand wash", "Clay bar", "Interior vacuum", "Leather conditioning"],
                    display_order=2,
                ),
                Addon(
                    name="Pet Hair Removal",
                    sedan_price=Decimal("25.00"),
                    suv_price=Decimal("35.00"),
                    commercial_price=Decimal("45.00"),
                    display_order=1,
                ),
                Addon(
                    name="Headlight Restoration",
                    sedan_price=Decimal("40.00"),
                    suv_price=Decimal("40.00"),
                    commercial_price=Decimal("50.00"),
                    display_order=2,
                ),
                SiteSetting(key=DEPOSIT_PERCENTAGE_KEY, value=str(settings.deposit_percentage)),
            ])

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise


async def main():
    """Main setup function."""
    logger.info("Starting booking API setup...")

    await setup_database()

    await create_sample_data()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn autodetail.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
