"""Async SQLAlchemy engine, sessions and the declarative base."""
