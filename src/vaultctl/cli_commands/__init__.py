"""Command implementations for the vc CLI."""
