"""Command line interface for the fan-out engine."""
