"""Maintenance domain services."""
