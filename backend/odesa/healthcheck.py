import asyncio
import logging
import sys

from odesa.core.config import get_settings
from odesa.db.database import Database

logger = logging.getLogger("odesa.healthcheck")


async def check() -> bool:
    settings = get_settings().model_copy(update={"DB_CONNECT_ATTEMPTS": 1})
    database = Database(settings)
    try:
        await database.connect()
        await database.ping()
        return True
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return False
    finally:
        await database.close()


def run():
    logging.basicConfig(level=logging.INFO)
    healthy = asyncio.run(check())
    print("Health check passed" if healthy else "Health check failed")
    sys.exit(0 if healthy else 1)


if __name__ == "__main__":
    run()
