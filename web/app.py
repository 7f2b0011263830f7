"""
Flask Web Application for Bid Finder.
JSON API behind the chat assistant's tools and the bid list/map views.
"""

import os
import sys
import logging
from flask import Flask, request, jsonify

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bid_finder.config import WEB_CONFIG, BID_SOURCES, DEFAULT_CONTRACTOR_PROFILE
from bid_finder.errors import InputValidationError
from bid_finder.models import BidRecord
from bid_finder.scoring import get_score_breakdown
from bid_finder.selection import get_selection_context
from bid_finder.tools import (search_bids, analyze_bid_pdf, analyze_selected_bid,
                              send_alert, selected_bid_summary)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = WEB_CONFIG['secret_key']


def get_payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def get_bid_payload(payload: dict) -> dict:
    """The "bid" object from a request body. Raises InputValidationError if it is missing or untitled."""
    bid_data = payload.get('bid')
    if not isinstance(bid_data, dict) or not bid_data.get('title'):
        raise InputValidationError('Bid is required')
    return bid_data


@app.errorhandler(InputValidationError)
def handle_validation_error(error):
    return jsonify({'error': error.message}), 400


# ============== Status Routes ==============

@app.route('/')
def index():
    """Service overview."""
    return jsonify({
        'service': 'bid-finder',
        'sources': [source['agency'] for source in BID_SOURCES],
        'profile': DEFAULT_CONTRACTOR_PROFILE,
    })


# ============== Bid Tool Routes ==============

@app.route('/api/bids/search', methods=['POST'])
def api_search_bids():
    """Search procurement sources and return bids ranked by match score."""
    query = get_payload().get('query')
    if not isinstance(query, str) or not query.strip():
        raise InputValidationError('Query is required')

    try:
        return jsonify(search_bids(query))
    except InputValidationError:
        raise
    except Exception as e:
        logger.error(f"Error searching bids: {e}")
        return jsonify({'error': 'Failed to search bids', 'details': str(e)}), 500


@app.route('/api/bids/analyze', methods=['POST'])
def api_analyze_bid():
    """Extract structured details from a bid notice PDF."""
    pdf_url = get_payload().get('pdfUrl')
    if not pdf_url:
        raise InputValidationError('PDF URL is required')

    try:
        return jsonify(analyze_bid_pdf(pdf_url))
    except InputValidationError:
        raise
    except Exception as e:
        logger.error(f"Error analyzing PDF: {e}")
        return jsonify({'error': 'Failed to analyze PDF', 'details': str(e)}), 500


@app.route('/api/bids/analyze/selected', methods=['POST'])
def api_analyze_selected_bid():
    """Analyze the selected bid's PDF and rescore it."""
    query = get_payload().get('query', '')
    context = get_selection_context()
    selected = context.get_selected_bid()
    if selected is None or not selected.pdf_url:
        raise InputValidationError('PDF URL is required')

    try:
        return jsonify(analyze_selected_bid(context, query=query))
    except InputValidationError:
        raise
    except Exception as e:
        logger.error(f"Error analyzing PDF: {e}")
        return jsonify({'error': 'Failed to analyze PDF', 'details': str(e)}), 500


@app.route('/api/bids/alert', methods=['POST'])
def api_send_alert():
    """Email an alert for a single bid."""
    payload = get_payload()
    email = payload.get('email')
    bid_title = payload.get('bidTitle')
    if not email or not bid_title:
        raise InputValidationError('Email and bid title are required')

    try:
        result = send_alert(
            email,
            bid_title,
            agency=payload.get('agency'),
            due_date=payload.get('dueDate'),
            budget=payload.get('budget'),
            url=payload.get('url'),
        )
        return jsonify(result)
    except InputValidationError:
        raise
    except Exception as e:
        logger.error(f"Error sending alert: {e}")
        return jsonify({'error': 'Failed to send alert', 'details': str(e)}), 500


@app.route('/api/bids/score', methods=['POST'])
def api_score_breakdown():
    """Score breakdown for a single bid against the contractor profile."""
    payload = get_payload()
    bid_data = get_bid_payload(payload)
    bid = BidRecord.from_dict(bid_data)
    return jsonify(get_score_breakdown(bid, query=payload.get('query', '')))


# ============== Selection & Map Routes ==============

@app.route('/api/bids/selected', methods=['GET'])
def api_get_selected_bid():
    return jsonify({'bid': selected_bid_summary()})


@app.route('/api/bids/selected', methods=['POST'])
def api_select_bid():
    bid_data = get_bid_payload(get_payload())
    bid = BidRecord.from_dict(bid_data)
    get_selection_context().set_selected_bid(bid)
    return jsonify({'bid': bid.to_dict()})


@app.route('/api/bids/selected', methods=['DELETE'])
def api_clear_selected_bid():
    get_selection_context().clear_selected_bid()
    return jsonify({'bid': None})


@app.route('/api/bids/map')
def api_map_markers():
    """Markers for the bids from the latest search."""
    context = get_selection_context()
    search = context.get_map_search()
    return jsonify({'query': search['query'], 'markers': context.map_markers()})


if __name__ == '__main__':
    logger.info("Starting Bid Finder web application")
    app.run(debug=WEB_CONFIG['debug'], port=WEB_CONFIG['port'])
