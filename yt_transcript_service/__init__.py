"""Fetch YouTube caption transcripts and serve them over HTTP"""

__version__ = "1.0.0"
