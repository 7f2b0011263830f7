"""
Bid Finder - search, score, and track government construction bids.
"""

__version__ = '0.1.0'
