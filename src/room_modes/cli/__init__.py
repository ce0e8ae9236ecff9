"""Command-line tools for room mode analysis."""
