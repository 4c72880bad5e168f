"""Command-line tools for ZYLORB."""
