"""Command-line scripts for the queueing simulation."""
