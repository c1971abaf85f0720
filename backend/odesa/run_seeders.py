import asyncio
import logging

from odesa.core.config import get_settings
from odesa.core.logging import setup_logging
from odesa.crud.storage import Storage
from odesa.db.database import Database
from odesa.seeds.seed_subscription_plans import seed_subscription_plans
from odesa.seeds.seed_templates import seed_templates

logger = logging.getLogger("odesa.seeds")


async def seed_all(storage: Storage):
    await seed_subscription_plans(storage)
    await seed_templates(storage)


async def main():
    settings = get_settings()
    setup_logging(settings)
    database = Database(settings)
    await database.connect()
    try:
        logger.info("Starting DB seeding...")
        await database.ensure_indexes()
        await seed_all(Storage(database.db))
        logger.info("All seeders completed!")
    finally:
        await database.close()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
