"""Validation of generated dev container and editor configurations."""
