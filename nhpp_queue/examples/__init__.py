"""Worked example models."""
