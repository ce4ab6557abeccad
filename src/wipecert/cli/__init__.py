"""Command-line tools for wipecert."""
