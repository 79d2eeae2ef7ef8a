"""Damage phases and blockade generation."""
