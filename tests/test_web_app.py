"""Tests for the Flask JSON API."""

from unittest.mock import patch

import pytest

from bid_finder.errors import (EmailDeliveryError, ExtractionError, InputValidationError,
                               ScrapeError)
from bid_finder.models import ScoredBidRecord
from bid_finder.selection import get_selection_context

SELECTED_BID = {
    'title': 'Gym Roof Replacement Project',
    'bid_number': '4521',
    'agency': 'San Francisco USD',
    'trades': ['Roofing'],
    'pdf_url': 'https://www.sfusd.edu/docs/4521.pdf',
    'score': 88,
}


def test_index(client):
    response = client.get('/')
    assert response.status_code == 200
    assert 'San Francisco USD' in response.get_json()['sources']


class TestSearchRoute:

    @patch('web.app.search_bids')
    def test_search(self, mock_search, client):
        mock_search.return_value = {'data': {'bids': [{'title': 'Gym Roof Project', 'score': 90}]}}

        response = client.post('/api/bids/search', json={'query': 'roofing'})

        assert response.status_code == 200
        assert response.get_json()['data']['bids'][0]['score'] == 90
        mock_search.assert_called_once_with('roofing')

    @patch('web.app.search_bids')
    def test_missing_query(self, mock_search, client):
        response = client.post('/api/bids/search', json={})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Query is required'}
        mock_search.assert_not_called()

    @patch('web.app.search_bids')
    def test_blank_query(self, mock_search, client):
        response = client.post('/api/bids/search', json={'query': '   '})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Query is required'}
        mock_search.assert_not_called()

    @patch('web.app.search_bids')
    def test_collaborator_failure(self, mock_search, client):
        mock_search.side_effect = ScrapeError('Scrape failed', status=503)

        response = client.post('/api/bids/search', json={'query': 'roofing'})

        assert response.status_code == 500
        body = response.get_json()
        assert body['error'] == 'Failed to search bids'
        assert '503' in body['details']


class TestAnalyzeRoutes:

    @patch('web.app.analyze_bid_pdf')
    def test_analyze(self, mock_analyze, client):
        mock_analyze.return_value = {'scope_summary': 'Reroof gym'}

        response = client.post('/api/bids/analyze', json={'pdfUrl': 'http://x/doc.pdf'})

        assert response.status_code == 200
        assert response.get_json() == {'scope_summary': 'Reroof gym'}
        mock_analyze.assert_called_once_with('http://x/doc.pdf')

    def test_analyze_missing_url(self, client):
        response = client.post('/api/bids/analyze', json={})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'PDF URL is required'}

    @patch('web.app.analyze_bid_pdf')
    def test_analyze_failure(self, mock_analyze, client):
        mock_analyze.side_effect = ExtractionError('Extraction failed', status=500, detail='timeout')

        response = client.post('/api/bids/analyze', json={'pdfUrl': 'http://x/doc.pdf'})

        assert response.status_code == 500
        assert response.get_json()['error'] == 'Failed to analyze PDF'

    def test_analyze_selected_without_selection(self, client):
        response = client.post('/api/bids/analyze/selected', json={})
        assert response.status_code == 400

    @patch('web.app.analyze_selected_bid')
    def test_analyze_selected(self, mock_analyze, client):
        client.post('/api/bids/selected', json={'bid': SELECTED_BID})
        mock_analyze.return_value = {'bid': {'title': 'Gym Roof Replacement Project'}, 'score': 91,
                                     'breakdown': {}}

        response = client.post('/api/bids/analyze/selected', json={'query': 'roof'})

        assert response.status_code == 200
        assert response.get_json()['score'] == 91
        mock_analyze.assert_called_once_with(get_selection_context(), query='roof')


class TestAlertRoute:

    @patch('web.app.send_alert')
    def test_send_alert(self, mock_send, client):
        mock_send.return_value = {'success': True, 'message': 'Alert sent to a@b.com', 'data': {'id': 'm1'}}

        response = client.post('/api/bids/alert', json={
            'email': 'a@b.com', 'bidTitle': 'Gym Roof Project', 'agency': 'SFUSD',
            'dueDate': '03/15/2025', 'budget': '$150k', 'url': 'https://x/bid',
        })

        assert response.status_code == 200
        assert response.get_json()['success'] is True
        mock_send.assert_called_once_with('a@b.com', 'Gym Roof Project', agency='SFUSD',
                                          due_date='03/15/2025', budget='$150k', url='https://x/bid')

    def test_alert_missing_fields(self, client):
        response = client.post('/api/bids/alert', json={'email': 'a@b.com'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Email and bid title are required'}

    @patch('web.app.send_alert')
    def test_alert_delivery_failure(self, mock_send, client):
        mock_send.side_effect = EmailDeliveryError('Email not configured')

        response = client.post('/api/bids/alert', json={'email': 'a@b.com', 'bidTitle': 'Gym Roof Project'})

        assert response.status_code == 500
        assert response.get_json()['error'] == 'Failed to send alert'


class TestScoreRoute:

    def test_breakdown(self, client):
        response = client.post('/api/bids/score', json={
            'bid': {'title': 'Roofing Project', 'trades': ['Roofing'], 'estimated_budget': '$150k'},
            'query': 'roofing',
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body['final_score'] == 100
        assert set(body['factors']) == {'trades', 'requirements', 'budget', 'relevance'}

    def test_bid_required(self, client):
        response = client.post('/api/bids/score', json={})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Bid is required'}


class TestSelectionRoutes:

    def test_select_read_clear(self, client):
        assert client.get('/api/bids/selected').get_json() == {'bid': None}

        response = client.post('/api/bids/selected', json={'bid': SELECTED_BID})
        assert response.status_code == 200
        assert response.get_json()['bid']['bid_number'] == '4521'

        selected = client.get('/api/bids/selected').get_json()['bid']
        assert selected['title'] == 'Gym Roof Replacement Project'
        assert selected['pdf_url'] == 'https://www.sfusd.edu/docs/4521.pdf'

        assert client.delete('/api/bids/selected').get_json() == {'bid': None}
        assert client.get('/api/bids/selected').get_json() == {'bid': None}

    def test_map_markers(self, client):
        get_selection_context().set_map_search('roof', [
            ScoredBidRecord(title='Gym Roof Project', agency='SFUSD', latitude=37.77, longitude=-122.41, score=90),
            ScoredBidRecord(title='No Coordinates Project', score=50),
        ])

        body = client.get('/api/bids/map').get_json()

        assert body['query'] == 'roof'
        assert body['markers'] == [{
            'title': 'Gym Roof Project',
            'agency': 'SFUSD',
            'latitude': 37.77,
            'longitude': -122.41,
            'score': 90,
            'source_url': '',
        }]


@patch('web.app.send_alert')
def test_validation_error_from_tool_is_400(mock_send, client):
    mock_send.side_effect = InputValidationError('Email and bid title are required')

    response = client.post('/api/bids/alert', json={'email': 'a@b.com', 'bidTitle': 'Gym Roof Project'})

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Email and bid title are required'}


def test_string_trades_are_not_split_into_letters(client):
    response = client.post('/api/bids/score', json={
        'bid': {'title': 'Wiring Project', 'trades': 'Electrical'},
    })

    assert response.status_code == 200
    assert response.get_json()['factors']['trades']['raw_score'] == 0


@pytest.mark.parametrize('route', ['/api/bids/score', '/api/bids/selected'])
@pytest.mark.parametrize('bid', ['Gym Roof Project', ['Gym Roof Project'], {'agency': 'SFUSD'}])
def test_malformed_bid_is_400(route, bid, client):
    response = client.post(route, json={'bid': bid})

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Bid is required'}
