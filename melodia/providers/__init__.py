"""Concrete adapters for the interfaces in ``melodia.interfaces``."""
