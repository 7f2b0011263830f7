"""Tests for bid document extraction."""

from unittest.mock import MagicMock, patch

import pytest

from bid_finder.errors import ExtractionError
from bid_finder.extraction import (BID_DETAIL_SCHEMA, EXTRACTION_PROMPT, DocumentExtractor,
                                   apply_extraction, unwrap_result)

PDF_URL = 'https://www.sfusd.edu/docs/11890-notice.pdf'

EXTRACTED = {
    'scope_summary': 'Replace the gymnasium roof membrane.',
    'bid_ask': {'summary': 'Roof replacement', 'deliverables': ['Tear-off', 'New membrane']},
    'pay': {'estimated_budget': '$180,000', 'payment_terms': 'Net 30', 'retainage': '5%'},
    'contract_length': {'duration': '90 days', 'milestones': ['Mobilization']},
    'hard_requirements': ['C-39 license', 'Performance bond'],
    'soft_requirements': ['School site experience'],
    'termination_clauses': {'for_convenience': '10 days written notice'},
    'trades_required': ['Roofing'],
}


def mock_response(status_code=200, json_data=None, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_data
    response.text = text
    return response


class TestDocumentExtractor:

    @patch('bid_finder.extraction.requests.post')
    def test_extract_sends_schema_and_unwraps_result(self, mock_post):
        mock_post.return_value = mock_response(json_data={'job_id': 'j1', 'result': [EXTRACTED]})
        extractor = DocumentExtractor(api_key='rd-test', api_url='https://extract.example/extract')

        assert extractor.extract_bid_from_pdf(PDF_URL) == EXTRACTED

        args, kwargs = mock_post.call_args
        assert args[0] == 'https://extract.example/extract'
        assert kwargs['headers']['Authorization'] == 'Bearer rd-test'
        assert kwargs['json'] == {
            'input': PDF_URL,
            'instructions': {'schema': BID_DETAIL_SCHEMA, 'system_prompt': EXTRACTION_PROMPT},
        }

    @patch('bid_finder.extraction.requests.post')
    def test_provider_error_carries_status(self, mock_post):
        mock_post.return_value = mock_response(status_code=422, text='Unsupported document')
        extractor = DocumentExtractor(api_key='rd-test')

        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract_bid_from_pdf(PDF_URL)
        assert exc_info.value.status == 422
        assert 'Unsupported document' in str(exc_info.value)

    @patch('bid_finder.extraction.requests.post')
    def test_missing_api_key_fails_without_request(self, mock_post):
        extractor = DocumentExtractor(api_key='')

        with pytest.raises(ExtractionError):
            extractor.extract_bid_from_pdf(PDF_URL)
        mock_post.assert_not_called()


class TestUnwrapResult:

    def test_first_list_entry(self):
        assert unwrap_result({'result': [{'a': 1}, {'a': 2}]}) == {'a': 1}

    def test_result_object(self):
        assert unwrap_result({'result': {'a': 1}}) == {'a': 1}

    def test_no_result_key_returns_payload(self):
        assert unwrap_result({'a': 1}) == {'a': 1}

    def test_empty_result_list_returns_payload(self):
        assert unwrap_result({'result': []}) == {'result': []}


class TestApplyExtraction:

    def test_attaches_details(self, make_bid):
        bid = make_bid(trades=['Roofing'], estimated_budget='TBD')
        analyzed = apply_extraction(bid, EXTRACTED)

        assert analyzed.analyzed is True
        assert analyzed.scope_summary == 'Replace the gymnasium roof membrane.'
        assert analyzed.pay.estimated_budget == '$180,000'
        assert analyzed.bid_ask.deliverables == ['Tear-off', 'New membrane']
        assert analyzed.contract_length.duration == '90 days'
        assert analyzed.hard_requirements == ['C-39 license', 'Performance bond']
        assert analyzed.termination_clauses.for_convenience == '10 days written notice'
        assert analyzed.trades_required == ['Roofing']
        assert analyzed.title == bid.title

    def test_original_bid_untouched(self, make_bid):
        bid = make_bid()
        apply_extraction(bid, EXTRACTED)

        assert bid.analyzed is False
        assert bid.hard_requirements == []

    def test_absent_trades_required_stays_unset(self, make_bid):
        analyzed = apply_extraction(make_bid(), {'scope_summary': 'Paint classrooms'})

        assert analyzed.trades_required is None
        assert analyzed.pay is None
        assert analyzed.hard_requirements == []

    def test_non_dict_result(self, make_bid):
        analyzed = apply_extraction(make_bid(), 'unexpected')
        assert analyzed.analyzed is True
        assert analyzed.scope_summary == ''
