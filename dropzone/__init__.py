"""
Drop Zone

Keyword-addressed, time-limited file sharing backend.
"""

__version__ = "1.0.0"
