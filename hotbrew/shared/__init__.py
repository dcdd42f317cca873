"""Shared infrastructure: constants, settings, logging, errors, database."""
