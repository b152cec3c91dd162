"""
Core utilities and configuration for the PriceCatcher snapshot pipeline.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: SQLite working store and snapshot store management
    backup: Stepped online copy between SQLite databases
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import SqliteStore
    from core.exceptions import ArtifactFetchError, MappingError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Create the ephemeral working store
    store = SqliteStore.in_memory()
    store.create_schema()
"""
