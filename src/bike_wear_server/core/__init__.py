"""Core infrastructure: configuration, database, errors and locking."""
