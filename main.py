import argparse
import asyncio
import logging
import os

import uvicorn
from dotenv import load_dotenv

from bot.webhook import create_app
from db.models import init_db


def setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def main(start_server: bool = True, host: str = None, port: int = None) -> None:
    # Load environment variables
    load_dotenv()

    setup_logging()
    logger = logging.getLogger(__name__)

    db_path = os.getenv("DB_PATH", "dogebot.db")

    # If user requested no server start (dry-run), initialize the DB and exit
    if not start_server:
        logger.info("Initializing database: %s", db_path)
        asyncio.run(init_db(db_path))
        logger.info("Dry-run complete: DB initialized, exiting without starting server.")
        return

    host = host or os.getenv("API_HOST", "0.0.0.0")
    port = port or int(os.getenv("API_PORT", "8000"))

    # The app lifespan initializes the database and starts the code sweeper.
    app = create_app(db_path)
    logger.info("Server starting on %s:%s. Press Ctrl+C to stop.", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dogebot chat backend runner")
    parser.add_argument("--dry-run", dest="dry_run", action="store_true", help="Initialize DB and exit without starting the server")
    parser.add_argument("--host", default=None, help="Bind address (default: API_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT or 8000)")
    args = parser.parse_args()

    try:
        main(start_server=not args.dry_run, host=args.host, port=args.port)
    except (KeyboardInterrupt, SystemExit):
        print("Shutting down")
