"""Database layer: enums, ORM models and session factory."""
