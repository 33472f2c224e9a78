"""CLI commands for the Inkwell CLI."""
