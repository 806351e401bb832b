"""
Sync NIH RePORTER award records to paginated JSON files, per state and year.
"""

__version__ = "0.1.0"
