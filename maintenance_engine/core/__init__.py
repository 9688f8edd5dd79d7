"""Configuration, constants and logging helpers."""
