"""Request-layer helpers: authentication gates and token security."""
