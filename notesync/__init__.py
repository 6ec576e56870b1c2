"""
notesync.

Local-first note synchronization engine.

- core/: Configuration, logging, exceptions, resilience, concurrency
- models/: SQLAlchemy models for the local SQLite store
- repositories/: Data access for the local store
- schemas/: Pydantic value types (notes, sync results)
- services/: Local store service and the application controller
- sync/: Connectivity monitor, debounce scheduler, sync reconciler
- remote/: HTTP client for the remote note service
"""

__version__ = "0.1.0"
