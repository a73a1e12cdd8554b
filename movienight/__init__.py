"""
Movie night watchlist bot with automatic weekly scheduling.
"""

__version__ = "0.1.0"
