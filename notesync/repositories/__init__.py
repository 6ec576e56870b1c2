"""Data access layer for the local note store."""
