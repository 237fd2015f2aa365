"""Shared utilities for xkcdvault: constants, errors, logging helpers,
deadlines and service protocols."""
