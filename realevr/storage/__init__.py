"""
Storage backends. The JSON file store is the default; the relational store is
used when DATABASE_URL is configured.
"""

import logging

from realevr.config import Settings
from realevr.storage.base import BaseStorage, run_autosave
from realevr.storage.memory import MemStorage
from realevr.storage.database import DatabaseStorage
from realevr.storage.seed import seed_storage

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> BaseStorage:
    """Build the storage backend selected by configuration."""
    if settings.uses_database:
        logger.info("Using database storage")
        return DatabaseStorage(
            settings.database_url,
            seed=settings.seed_sample_data,
            connect_retries=settings.db_connect_retries,
            connect_initial_delay=settings.db_connect_initial_delay,
            echo=settings.debug,
        )

    logger.info(f"Using JSON file storage at {settings.data_file}")
    return MemStorage(settings.data_file, seed=settings.seed_sample_data)


__all__ = [
    "BaseStorage",
    "MemStorage",
    "DatabaseStorage",
    "create_storage",
    "run_autosave",
    "seed_storage",
]
