# plugins/__init__.py
"""Command bodies discovered by cmdengine.interface.loader."""
