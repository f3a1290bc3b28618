"""Use cases — entry points the CLI calls."""
