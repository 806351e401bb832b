"""
Flat-file persistence for fetched pages.
"""

from .page_store import PageStore

__all__ = ['PageStore']
