#!/usr/bin/env python3
"""
MindEase Database Setup Script
==============================

Creates the wellness tables before starting the server and, optionally,
a demo user with a bearer token for trying the API.

Usage:
    python scripts/setup_database.py [--check-only] [--demo-user EMAIL]
"""

import sys
import logging
import argparse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import engine, SessionLocal
from app.db.base import Base
from app.core.security import create_access_token
from app import crud

# Import all models to ensure they are registered with Base.metadata
from app import models  # noqa: F401

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def test_connection():
    """Test database connection"""
    logger.info("🔌 Testing database connection...")
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("✅ Database connection successful")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Database connection failed: {e}")
        return False


def check_tables_exist():
    """Check if all required tables exist"""
    try:
        inspector = inspect(engine)
        existing_tables = inspector.get_table_names()
        required_tables = [table.name for table in Base.metadata.tables.values()]
        missing_tables = [table for table in required_tables if table not in existing_tables]

        logger.info(f"📋 Found {len(existing_tables)} existing tables")
        logger.info(f"📋 Required {len(required_tables)} tables")

        if missing_tables:
            logger.warning(f"⚠️ Missing tables: {missing_tables}")
            return False
        logger.info("✅ All required tables exist")
        return True

    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to check tables: {e}")
        return False


def create_tables():
    """Create all required tables"""
    try:
        logger.info("🏗️ Creating database tables...")
        Base.metadata.create_all(bind=engine)

        created_tables = inspect(engine).get_table_names()
        logger.info(f"✅ Successfully created {len(created_tables)} tables")
        if created_tables:
            logger.info(f"📋 Created tables: {', '.join(created_tables)}")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to create tables: {e}")
        return False


def create_demo_user(email: str):
    """Create (or reuse) a demo user and return a bearer token for it"""
    logger.info(f"👤 Preparing demo user {email}...")
    try:
        with SessionLocal() as db:
            user = crud.user.get_by_email(db, email=email)
            if user:
                logger.info("ℹ️ Demo user already exists")
            else:
                user = crud.user.create(db, email=email, full_name="Demo User")
                logger.info(f"✅ Created demo user: {email}")
            return create_access_token(user.id)
    except SQLAlchemyError as e:
        logger.error(f"❌ Error creating demo user: {e}")
        return None


def main():
    """Main setup function"""
    parser = argparse.ArgumentParser(description='MindEase Database Setup')
    parser.add_argument('--check-only', action='store_true',
                        help='Only check if tables exist, do not create')
    parser.add_argument('--demo-user', metavar='EMAIL',
                        help='Create a demo user and print a bearer token for it')

    args = parser.parse_args()

    logger.info("🚀 MindEase Database Setup")
    logger.info("=" * 40)

    if not test_connection():
        logger.error("❌ Cannot proceed without database connection")
        sys.exit(1)

    tables_exist = check_tables_exist()

    if args.check_only:
        if tables_exist:
            logger.info("✅ Database check passed - all tables exist")
            sys.exit(0)
        logger.error("❌ Database check failed - missing tables")
        sys.exit(1)

    if not tables_exist and not create_tables():
        logger.error("❌ Failed to create tables")
        sys.exit(1)

    if args.demo_user:
        token = create_demo_user(args.demo_user)
        if token:
            logger.info("")
            logger.info(f"Bearer token for {args.demo_user}:")
            logger.info(f"  {token}")
        else:
            logger.warning("⚠️ Failed to create demo user (tables created successfully)")

    if check_tables_exist():
        logger.info("🎉 Database setup completed successfully!")
        logger.info("")
        logger.info("You can now start the server with:")
        logger.info("  python -m uvicorn app.main:app --host 0.0.0.0 --port 8000")
    else:
        logger.error("❌ Setup verification failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
