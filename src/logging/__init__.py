"""Logging setup: formatters, context variables, file rotation."""
