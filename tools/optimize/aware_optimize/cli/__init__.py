"""Command-line entry points for aware-optimize."""
