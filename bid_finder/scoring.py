"""
Scoring Engine for Bid Finder.
Calculates how well each bid fits the contractor profile and ranks bids by match score.
"""

import re
import math
import logging
from typing import Dict, List, Optional, Sequence

from .filtering import tokenize_query
from .models import BidRecord, ContractorProfile, ScoredBidRecord

logger = logging.getLogger(__name__)

BUDGET_PATTERN = re.compile(r'([\d,.]+)\s*(k|m|million|thousand)?', re.IGNORECASE)
NUMBER_PREFIX = re.compile(r'\d+(?:\.\d*)?|\.\d+')

BUDGET_MULTIPLIERS = {
    'k': 1000,
    'thousand': 1000,
    'm': 1000000,
    'million': 1000000,
}

NEUTRAL_SCORE = 50


def round_half_up(value: float) -> int:
    """Round .5 upwards, the way budget and match percentages are displayed."""
    return int(math.floor(value + 0.5))


def parse_budget(text: str) -> Optional[float]:
    """
    Pull a dollar amount out of free-text budget like "$150k" or "1.2 million".
    Returns None when no number can be found.
    """
    if not text:
        return None

    match = BUDGET_PATTERN.search(text)
    if not match:
        return None

    number = NUMBER_PREFIX.match(match.group(1).replace(',', ''))
    if not number:
        return None

    amount = float(number.group(0))
    suffix = (match.group(2) or '').lower()
    return amount * BUDGET_MULTIPLIERS.get(suffix, 1)


class BidScoringEngine:
    """Engine for calculating bid match scores."""

    # Weights for different scoring factors
    WEIGHTS = {
        'trades': 0.35,         # Bid trades the contractor performs
        'requirements': 0.25,   # Fewer hard requirements = easier to win
        'budget': 0.20,         # Budget inside the preferred range
        'relevance': 0.20,      # Query words found in the bid
    }

    def __init__(self, profile: ContractorProfile = None):
        self.profile = profile or ContractorProfile.default()

    def calculate_trades_match(self, bid: BidRecord) -> int:
        """Percentage of bid trades the contractor performs (substring match either way)."""
        bid_trades = bid.trades_required if bid.trades_required is not None else (bid.trades or [])
        if not bid_trades:
            return NEUTRAL_SCORE  # No trades specified

        profile_trades = [t.lower() for t in self.profile.trades]
        match_count = 0
        for trade in bid_trades:
            trade_lower = trade.lower()
            if any(pt in trade_lower or trade_lower in pt for pt in profile_trades):
                match_count += 1

        return round_half_up(match_count / len(bid_trades) * 100)

    @staticmethod
    def calculate_requirements_fit(bid: BidRecord) -> int:
        """
        0 hard requirements = 100, each one costs 10 points,
        floored at 50 from five requirements on.
        """
        penalty = min(len(bid.hard_requirements or []) * 10, 50)
        return 100 - penalty

    def calculate_budget_fit(self, bid: BidRecord) -> int:
        budget_text = (bid.pay.estimated_budget if bid.pay else '') or bid.estimated_budget
        amount = parse_budget(budget_text)

        if not amount:
            return NEUTRAL_SCORE  # Unknown budget

        low = self.profile.preferred_budget_min
        high = self.profile.preferred_budget_max

        if low <= amount <= high:
            return 100

        if amount < low:
            return round_half_up(amount / low * 100)
        return round_half_up(high / amount * 100)

    @staticmethod
    def calculate_query_relevance(bid: BidRecord, query: str) -> int:
        """Percentage of query words found in the bid's title, scope, and trades."""
        if not query or not query.strip():
            return 100  # No query = everything is relevant

        words = tokenize_query(query)
        if not words:
            return 100

        bid_text = ' '.join([
            bid.title or '',
            bid.scope_summary or '',
            ' '.join(bid.trades or []),
            ' '.join(bid.trades_required or []),
        ]).lower()

        match_count = len([w for w in words if w in bid_text])
        return round_half_up(match_count / len(words) * 100)

    def calculate_factor_scores(self, bid: BidRecord, query: str) -> Dict[str, int]:
        return {
            'trades': self.calculate_trades_match(bid),
            'requirements': self.calculate_requirements_fit(bid),
            'budget': self.calculate_budget_fit(bid),
            'relevance': self.calculate_query_relevance(bid, query),
        }

    def calculate_bid_score(self, bid: BidRecord, query: str = '') -> int:
        """
        Calculate match score for a single bid.
        Returns score from 0-100.
        """
        scores = self.calculate_factor_scores(bid, query)

        total_score = (
            scores['trades'] * self.WEIGHTS['trades'] +
            scores['requirements'] * self.WEIGHTS['requirements'] +
            scores['budget'] * self.WEIGHTS['budget'] +
            scores['relevance'] * self.WEIGHTS['relevance']
        )

        return min(100, max(0, round_half_up(total_score)))

    def rank_bids(self, bids: Sequence[BidRecord], query: str = '') -> List[ScoredBidRecord]:
        """
        Score every bid and sort by score, highest first.
        Equal scores keep their original (discovery) order.
        """
        scored = [ScoredBidRecord.from_bid(bid, self.calculate_bid_score(bid, query)) for bid in bids]
        ranked = sorted(scored, key=lambda b: b.score, reverse=True)
        if ranked:
            logger.info(f"Ranked {len(ranked)} bids, top score {ranked[0].score}")
        return ranked

    def get_score_breakdown(self, bid: BidRecord, query: str = '') -> Dict:
        """
        Get detailed breakdown of how a bid's score was calculated.
        Useful for displaying next to the bid card.
        """
        scores = self.calculate_factor_scores(bid, query)
        return {
            'title': bid.title,
            'final_score': self.calculate_bid_score(bid, query),
            'factors': {
                factor: {
                    'raw_score': scores[factor],
                    'weight': weight,
                    'weighted_score': scores[factor] * weight,
                }
                for factor, weight in self.WEIGHTS.items()
            },
        }


def calculate_bid_score(bid: BidRecord, profile: ContractorProfile, query: str = '') -> int:
    return BidScoringEngine(profile).calculate_bid_score(bid, query)


def score_and_sort_bids(bids: Sequence[BidRecord], profile: ContractorProfile,
                        query: str = '') -> List[ScoredBidRecord]:
    return BidScoringEngine(profile).rank_bids(bids, query)


def get_score_breakdown(bid: BidRecord, profile: ContractorProfile = None, query: str = '') -> Dict:
    return BidScoringEngine(profile).get_score_breakdown(bid, query)
