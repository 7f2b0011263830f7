"""
Tools exposed to the chat assistant: search bids, analyze a bid PDF, send a bid alert.

Each tool validates its input before calling any external service and
lets collaborator errors propagate; the web layer turns them into error
responses.
"""

import logging
from typing import Dict, Optional

from .config import DEFAULT_COORDINATES
from .discovery import BidDiscoveryEngine
from .errors import InputValidationError
from .extraction import DocumentExtractor, apply_extraction
from .models import ContractorProfile, ScoredBidRecord
from .notifications import NotificationService
from .scoring import BidScoringEngine
from .selection import SelectionContext, get_selection_context

logger = logging.getLogger(__name__)


def sanitize_bid(bid: ScoredBidRecord) -> Dict:
    """Listing fields with no None values, for rendering."""
    data = bid.to_summary_dict()
    for key, value in data.items():
        if value is None and key not in ('latitude', 'longitude'):
            data[key] = ''
    data['title'] = data['title'] or 'Untitled Bid'
    data['trades'] = list(data['trades'] or [])
    if data['latitude'] is None or data['longitude'] is None:
        data['latitude'], data['longitude'] = DEFAULT_COORDINATES
    return data


def search_bids(query: str, profile: ContractorProfile = None,
                engine: BidDiscoveryEngine = None,
                context: SelectionContext = None) -> Dict:
    """
    Find bids matching the query, ranked by match score.
    Returns {'data': {'bids': [...]}}; the list is empty, never missing, when nothing is found.
    """
    if not query or not query.strip():
        raise InputValidationError('Query is required')

    engine = engine or BidDiscoveryEngine()
    scorer = BidScoringEngine(profile)

    bids = engine.find_bids(query)
    ranked = scorer.rank_bids(bids, query)

    (context or get_selection_context()).set_map_search(query, ranked)

    return {'data': {'bids': [sanitize_bid(bid) for bid in ranked]}}


def analyze_bid_pdf(pdf_url: str, extractor: DocumentExtractor = None) -> Dict:
    """Run a bid notice PDF through document extraction and return the structured result."""
    if not pdf_url:
        raise InputValidationError('PDF URL is required')

    extractor = extractor or DocumentExtractor()
    return extractor.extract_bid_from_pdf(pdf_url)


def analyze_selected_bid(context: SelectionContext = None, extractor: DocumentExtractor = None,
                         profile: ContractorProfile = None, query: str = '') -> Dict:
    """
    Analyze the bid currently selected in the UI, reattach its listing metadata,
    and rescore it with the extracted requirements, trades, and budget.
    """
    context = context or get_selection_context()
    bid = context.get_selected_bid()
    if bid is None or not bid.pdf_url:
        raise InputValidationError('PDF URL is required')

    result = analyze_bid_pdf(bid.pdf_url, extractor)
    analyzed = apply_extraction(bid, result)
    context.set_selected_bid(analyzed)

    scorer = BidScoringEngine(profile)
    breakdown = scorer.get_score_breakdown(analyzed, query)
    logger.info(f"Analyzed '{analyzed.title}', score {breakdown['final_score']}")

    return {
        'bid': analyzed.to_dict(),
        'score': breakdown['final_score'],
        'breakdown': breakdown,
    }


def send_alert(email: str, bid_title: str, agency: str = '', due_date: str = '',
               budget: str = '', url: str = '',
               service: NotificationService = None) -> Dict:
    """Email a bid alert. Returns {'success': True, 'message': ..., 'data': provider response}."""
    if not email or not bid_title:
        raise InputValidationError('Email and bid title are required')

    service = service or NotificationService()
    result = service.send_bid_alert(email, {
        'title': bid_title,
        'agency': agency or 'Unknown Agency',
        'due_date': due_date or 'Not specified',
        'estimated_budget': budget or 'Not specified',
        'source_url': url or '#',
    })

    return {
        'success': True,
        'message': f'Alert sent to {email}',
        'data': result,
    }


def selected_bid_summary(context: SelectionContext = None) -> Optional[Dict]:
    """The selected bid as plain data, for the assistant's context."""
    bid = (context or get_selection_context()).get_selected_bid()
    return bid.to_dict() if bid else None
