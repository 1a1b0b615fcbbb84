from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings


def _build_engine():
    if settings.uses_sqlite:
        # Local runs and tests: one shared connection so in-memory databases survive
        return create_engine(
            settings.SQLALCHEMY_DATABASE_URI,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    # PostgreSQL configuration with connection pooling
    return create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        pool_size=10,
        max_overflow=20,
        pool_recycle=300,      # Recycle connections every 5 minutes
        pool_pre_ping=True,    # Validate connections before use
        pool_timeout=30,
        echo=False             # Set to True for SQL logging
    )


engine = _build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
