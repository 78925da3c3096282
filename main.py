import asyncio

from campus_badges.bot import main as run
from campus_badges.database import start_db
from campus_badges.database.db_manager import DBManager
from campus_badges.utils.env import load_env
from campus_badges.utils.logs import setup_logging

if __name__ == '__main__':
    load_env()
    setup_logging()

    with DBManager() as db:
        # Run full DB setup (schema + migrations)
        start_db.run(db)

    # Start the bot
    asyncio.run(run())
