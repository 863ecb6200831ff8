"""Create the players and coaches tables against the configured database."""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from athlete_base.config.settings import get_settings
from athlete_base.core.logger import setup_logger
from athlete_base.db.pool import ConnectionPool


async def init_db() -> None:
    """Create all database tables."""
    pool = ConnectionPool(get_settings())
    try:
        await pool.create_schema()
    finally:
        await pool.close()
    print("Database tables created successfully.")


if __name__ == "__main__":
    setup_logger(level=get_settings().log_level)
    asyncio.run(init_db())
