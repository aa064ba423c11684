"""Data access objects backed by local key-value storage."""
