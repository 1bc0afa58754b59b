import asyncio
import asyncpg
from alembic.config import Config
from alembic import command
from brokerage.core.config import settings
from brokerage.core.logging_config import logger

DB_RETRIES = 5
DB_RETRY_DELAY = 2

async def wait_for_db():
    db_url = settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://")
    for attempt in range(1, DB_RETRIES + 1):
        try:
            conn = await asyncpg.connect(db_url)
            await conn.close()
            logger.info("Database is ready")
            return
        except (OSError, asyncpg.PostgresError) as e:
            logger.warning(f"Waiting for database... Attempt {attempt}/{DB_RETRIES}: {e}")
            await asyncio.sleep(DB_RETRY_DELAY)
    raise ConnectionError("Database connection failed after retries")

def apply_migrations():
    if settings.DATABASE_URL.startswith("postgresql"):
        asyncio.run(wait_for_db())
    logger.info("Running Alembic upgrade to head...")
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(alembic_cfg, "head")
    logger.info("Migrations applied")

if __name__ == "__main__":
    apply_migrations()
