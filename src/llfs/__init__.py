"""
LLFS - Core Package

A fuzzy filesystem search engine that ranks files and directories against
structured search terms extracted from natural language queries.
"""

from .search.engine import SearchEngine, search, find

__version__ = "0.1.0"
__author__ = "LLFS Team"

__all__ = ['SearchEngine', 'search', 'find']
