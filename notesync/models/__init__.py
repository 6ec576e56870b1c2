"""SQLAlchemy models for the local note store."""
