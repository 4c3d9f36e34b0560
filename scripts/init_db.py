#!/usr/bin/env python3
"""
Standalone database initialization script
Creates the MealLog tables and the image upload directory, and can create
the first admin account.

Usage:
    python scripts/init_db.py [--admin USERNAME]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from app.config import settings
from app.exceptions import ServiceValidationError
from domain.enums import UserRole
from domain.models import SessionLocal, engine, init_database
from services.user_service import UserService

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("meallog.init_db")


def init_tables() -> bool:
    """Create tables and report what exists afterwards"""
    try:
        init_database()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return False

    tables = inspect(engine).get_table_names()
    logger.info(f"Database ready with {len(tables)} tables: {', '.join(tables)}")
    return True


def init_upload_root() -> bool:
    try:
        settings.upload_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create upload directory {settings.upload_root}: {e}")
        return False
    logger.info(f"Upload directory ready at {settings.upload_root.resolve()}")
    return True


def create_admin(username: str) -> bool:
    db = SessionLocal()
    try:
        user = UserService.create_user(db, username, UserRole.ADMIN)
        logger.info(f"Created admin '{username}' with user_id={user.user_id}")
        return True
    except ServiceValidationError as e:
        logger.warning(str(e))
        return True
    except Exception as e:
        logger.error(f"Failed to create admin '{username}': {e}")
        return False
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the MealLog database")
    parser.add_argument("--admin", metavar="USERNAME", help="create an admin account")
    args = parser.parse_args(argv)

    ok = init_tables() and init_upload_root()
    if ok and args.admin:
        ok = create_admin(args.admin)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
