"""
Keyword filtering of scraped bids against the user's search query.
"""

import logging
from typing import List, Sequence

from .models import BidRecord

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3


def tokenize_query(query: str) -> List[str]:
    """Lowercased whitespace tokens, dropping anything shorter than 3 characters."""
    if not query:
        return []
    return [word for word in query.lower().split() if len(word) >= MIN_TOKEN_LENGTH]


def searchable_text(bid: BidRecord) -> str:
    return f"{bid.title} {' '.join(bid.trades or [])} {bid.agency}".lower()


def matches_query(bid: BidRecord, tokens: Sequence[str]) -> bool:
    """True if any token appears in the bid's title, trades, or agency. No tokens matches all."""
    if not tokens:
        return True
    text = searchable_text(bid)
    return any(token in text for token in tokens)


def filter_bids(bids: Sequence[BidRecord], query: str) -> List[BidRecord]:
    tokens = tokenize_query(query)
    return [bid for bid in bids if matches_query(bid, tokens)]


def filter_with_fallback(bids: Sequence[BidRecord], query: str) -> List[BidRecord]:
    """Filter by query, but return every bid rather than none when nothing matches."""
    filtered = filter_bids(bids, query)
    if not filtered and bids:
        logger.info(f"No bids matched '{query}', returning all {len(bids)} bids")
        return list(bids)
    return filtered
