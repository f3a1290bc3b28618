"""Observability — logging setup and user-facing progress output."""
