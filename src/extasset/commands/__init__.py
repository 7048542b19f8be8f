"""CLI command modules for extasset."""
