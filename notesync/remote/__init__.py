"""Client for the remote note service."""
