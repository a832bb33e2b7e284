"""
Article summary service: deduplicated, cached summary generation.
"""

__version__ = "1.0.0"
