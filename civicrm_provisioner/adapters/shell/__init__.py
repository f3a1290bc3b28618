"""Shell adapters — run commands on the host."""
