"""CLI module for nanorouter."""
