"""Melodia - catalog service for artists and their releases."""
