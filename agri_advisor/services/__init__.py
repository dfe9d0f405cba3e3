"""Services that combine the pure engine with the store."""
