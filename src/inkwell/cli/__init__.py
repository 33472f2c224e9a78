"""Command line interface for operating an Inkwell deployment."""
