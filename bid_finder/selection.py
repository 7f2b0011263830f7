"""
Shared selection state between the chat tools and the bid views.

The selected bid is written by the bid list/card views and read by the
chat tools; the map search is written by the search tool and read by the
map view. Each field has exactly one writer.
"""

import logging
import threading
from typing import Dict, List, Optional

from .models import BidRecord, ScoredBidRecord

logger = logging.getLogger(__name__)


class SelectionContext:
    """Holds the currently selected bid and the latest map search."""

    def __init__(self):
        self._lock = threading.Lock()
        self._selected_bid: Optional[BidRecord] = None
        self._map_query: str = ''
        self._map_bids: List[ScoredBidRecord] = []

    def get_selected_bid(self) -> Optional[BidRecord]:
        with self._lock:
            return self._selected_bid

    def set_selected_bid(self, bid: Optional[BidRecord]):
        with self._lock:
            self._selected_bid = bid
        logger.debug(f"Selected bid: {bid.title if bid else None}")

    def clear_selected_bid(self):
        self.set_selected_bid(None)

    def get_map_search(self) -> Dict:
        with self._lock:
            return {'query': self._map_query, 'bids': list(self._map_bids)}

    def set_map_search(self, query: str, bids: List[ScoredBidRecord]):
        with self._lock:
            self._map_query = query
            self._map_bids = list(bids)

    def map_markers(self) -> List[Dict]:
        """Marker data for the map view, one per bid with coordinates."""
        with self._lock:
            bids = list(self._map_bids)
        return [
            {
                'title': bid.title,
                'agency': bid.agency,
                'latitude': bid.latitude,
                'longitude': bid.longitude,
                'score': bid.score,
                'source_url': bid.source_url,
            }
            for bid in bids
            if bid.latitude is not None and bid.longitude is not None
        ]


# Global selection context instance
_context: Optional[SelectionContext] = None
_context_lock = threading.Lock()


def get_selection_context() -> SelectionContext:
    """Get or create the global selection context."""
    global _context
    with _context_lock:
        if _context is None:
            _context = SelectionContext()
        return _context


def reset_selection_context():
    """Drop the global selection context (used between tests and app restarts)."""
    global _context
    with _context_lock:
        _context = None
