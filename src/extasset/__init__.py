"""extasset - Mirror external assets into content-addressed local storage.

This package provides tools for:
- Fetching remote scripts, stylesheets and images on a schedule
- Storing each version under a hash-derived key for cache-busting
- Resolving the currently servable URL for a named asset
"""

__version__ = "0.1.0"
