import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from bankledger.cli import BankingConsole
from bankledger.core.bootstrap import create_sample_data, initialize_database
from bankledger.core.config import settings
from bankledger.core.database import build_async_engine
from bankledger.core.exceptions import LedgerError, StoreUnavailableError
from bankledger.core.store import LedgerStore

logger = logging.getLogger("bankledger")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=f"{settings.APP_NAME} console")
    parser.add_argument("--database-url", default=settings.DATABASE_URL, help="SQLAlchemy async database URL")
    parser.add_argument("--no-seed", action="store_true", help="Skip sample data creation")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, console_factory=BankingConsole) -> int:
    """Initialize the store, seed it and run the console; returns the exit code"""
    engine = build_async_engine(args.database_url)
    try:
        # Startup
        try:
            await initialize_database(engine)
        except StoreUnavailableError as e:
            print(f"System initialization failed: {e}")
            print("Please check that the database server is running and DATABASE_URL is correct.")
            return 1

        store = LedgerStore.from_engine(engine)

        if settings.SEED_SAMPLE_DATA and not args.no_seed:
            try:
                await create_sample_data(store)
            except LedgerError as e:
                logger.warning(f"Sample data creation skipped: {str(e)}")

        print(f"=== {settings.APP_NAME} v{settings.APP_VERSION} ===")
        await console_factory(store).run()
        return 0
    finally:
        # Shutdown
        await engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
