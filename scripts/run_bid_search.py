#!/usr/bin/env python
"""
Run a bid search from the command line.
Scrapes all configured sources and prints bids ranked by match score.

Usage: python scripts/run_bid_search.py roofing school repair
"""

import sys
import os
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bid_finder.config import BID_SOURCES
from bid_finder.errors import BidFinderError
from bid_finder.tools import search_bids

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_bid_search(query: str):
    print("=" * 70)
    print(f"BID SEARCH: {query}")
    print(f"Sources: {', '.join(source['agency'] for source in BID_SOURCES)}")
    print("=" * 70)

    try:
        result = search_bids(query)
    except BidFinderError as e:
        logger.error(f"Search failed: {e}")
        return []

    bids = result['data']['bids']
    for i, bid in enumerate(bids, 1):
        print(f"\n[{i}] {bid['score']:>3}%  {bid['title']}")
        if bid['bid_number']:
            print(f"      Project No. {bid['bid_number']}")
        print(f"      {bid['agency']} - due {bid['due_date'] or 'TBD'}")
        if bid['trades']:
            print(f"      Trades: {', '.join(bid['trades'])}")
        if bid['pdf_url']:
            print(f"      Notice: {bid['pdf_url']}")

    print("\n" + "=" * 70)
    print(f"Total bids: {len(bids)}")
    print("=" * 70)
    return bids


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    run_bid_search(' '.join(sys.argv[1:]))
