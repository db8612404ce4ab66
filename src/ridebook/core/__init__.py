"""Shared infrastructure: config, errors, events, logging, CLI."""
