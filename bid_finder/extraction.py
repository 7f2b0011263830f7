"""
Bid document analysis for Bid Finder.
Sends a bid notice PDF to the Reducto extraction API and maps the result onto a bid record.
"""

import logging
from dataclasses import replace
from typing import Any, Dict

import requests

from .config import EXTRACTION_CONFIG
from .errors import ExtractionError
from .models import (BidAsk, BidRecord, ContractLength, PayTerms,
                     TerminationClauses, as_str, as_str_list)

logger = logging.getLogger(__name__)


def _string(description: str) -> Dict:
    return {'type': 'string', 'description': description}


def _string_list(description: str) -> Dict:
    return {'type': 'array', 'items': {'type': 'string'}, 'description': description}


# Target schema for detailed bid extraction
BID_DETAIL_SCHEMA = {
    'type': 'object',
    'properties': {
        'scope_summary': _string('Summary of the project scope and work required'),
        'bid_ask': {
            'type': 'object',
            'description': 'What the bid is asking for - the main deliverables and services requested',
            'properties': {
                'summary': _string('Brief summary of what is being requested'),
                'deliverables': _string_list('List of specific deliverables'),
            },
        },
        'pay': {
            'type': 'object',
            'description': 'Payment terms and budget information',
            'properties': {
                'estimated_budget': _string('Estimated budget or price range'),
                'payment_terms': _string('Payment schedule and terms'),
                'retainage': _string('Any retainage or holdback percentage'),
            },
        },
        'contract_length': {
            'type': 'object',
            'description': 'Duration and timeline of the contract',
            'properties': {
                'duration': _string('Total contract duration'),
                'start_date': _string('Expected start date'),
                'end_date': _string('Expected end date or deadline'),
                'milestones': _string_list('Key milestones'),
            },
        },
        'hard_requirements': _string_list(
            'Mandatory requirements that must be met - licenses, certifications, '
            'bonding, insurance minimums, etc.'),
        'soft_requirements': _string_list(
            'Preferred but not mandatory requirements - experience preferences, nice-to-haves'),
        'termination_clauses': {
            'type': 'object',
            'description': 'Contract termination terms and conditions',
            'properties': {
                'for_cause': _string('Termination for cause conditions'),
                'for_convenience': _string('Termination for convenience terms'),
                'notice_period': _string('Required notice period for termination'),
            },
        },
        'trades_required': _string_list('Specific trades needed (plumbing, electrical, HVAC, etc.)'),
    },
}

EXTRACTION_PROMPT = (
    'Extract detailed information from this government bid/RFP document. Focus on: '
    '1) What is being asked for (bid_ask), 2) Payment terms and budget (pay), '
    '3) Contract duration and timeline (contract_length), 4) Mandatory requirements like '
    'licenses, insurance, bonding (hard_requirements), 5) Preferred qualifications '
    '(soft_requirements), 6) Termination clauses and conditions, 7) Required trades. '
    'Be thorough and extract specific dollar amounts, dates, and percentages where available.'
)


class DocumentExtractor:
    """Client for the document extraction API."""

    def __init__(self, api_key: str = None, api_url: str = None, timeout: int = None):
        self.api_key = api_key if api_key is not None else EXTRACTION_CONFIG['api_key']
        self.api_url = api_url or EXTRACTION_CONFIG['api_url']
        self.timeout = timeout or EXTRACTION_CONFIG['timeout']

    def extract_bid_from_pdf(self, pdf_url: str) -> Dict[str, Any]:
        """
        Extract structured bid details from a PDF URL.
        Raises ExtractionError if the provider is unavailable or rejects the request.
        """
        if not self.api_key:
            raise ExtractionError("Extraction not configured. Set REDUCTO_API_KEY environment variable.")

        logger.info(f"Extracting bid details from {pdf_url}")
        try:
            response = requests.post(
                self.api_url,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                json={
                    'input': pdf_url,
                    'instructions': {
                        'schema': BID_DETAIL_SCHEMA,
                        'system_prompt': EXTRACTION_PROMPT,
                    },
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExtractionError("Extraction request failed", detail=str(e)) from e

        if not response.ok:
            raise ExtractionError("Extraction failed", status=response.status_code, detail=response.text)

        return unwrap_result(response.json())


def unwrap_result(data: Any) -> Any:
    """The provider wraps results in a list under "result"; return the first entry."""
    if not isinstance(data, dict):
        return data
    result = data.get('result')
    if isinstance(result, list) and result:
        return result[0]
    return result or data


def apply_extraction(bid: BidRecord, result: Dict[str, Any]) -> BidRecord:
    """Return a copy of the bid with extracted details attached and marked analyzed."""
    result = result if isinstance(result, dict) else {}
    trades_required = result.get('trades_required')
    return replace(
        bid,
        analyzed=True,
        scope_summary=as_str(result.get('scope_summary')),
        bid_ask=BidAsk.from_dict(result.get('bid_ask')),
        pay=PayTerms.from_dict(result.get('pay')),
        contract_length=ContractLength.from_dict(result.get('contract_length')),
        hard_requirements=as_str_list(result.get('hard_requirements')),
        soft_requirements=as_str_list(result.get('soft_requirements')),
        termination_clauses=TerminationClauses.from_dict(result.get('termination_clauses')),
        trades_required=as_str_list(trades_required) if trades_required is not None else None,
    )
