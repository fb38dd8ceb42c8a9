"""Option parsing and host adapters."""
