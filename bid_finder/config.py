"""
Configuration for Bid Finder.
Values come from environment variables with sensible defaults.
"""

import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Web scraping provider (returns pages as markdown)
SCRAPE_CONFIG = {
    'api_url': os.environ.get('FIRECRAWL_API_URL', 'https://api.firecrawl.dev/v1/scrape'),
    'api_key': os.environ.get('FIRECRAWL_API_KEY', ''),
    'timeout': int(os.environ.get('SCRAPE_TIMEOUT', 60)),
    'max_workers': int(os.environ.get('SCRAPE_MAX_WORKERS', 4)),
}

# Document extraction provider (structured fields from bid PDFs)
EXTRACTION_CONFIG = {
    'api_url': os.environ.get('REDUCTO_API_URL', 'https://platform.reducto.ai/extract'),
    'api_key': os.environ.get('REDUCTO_API_KEY', ''),
    'timeout': int(os.environ.get('EXTRACTION_TIMEOUT', 120)),
}

# Transactional email provider
EMAIL_CONFIG = {
    'api_url': os.environ.get('RESEND_API_URL', 'https://api.resend.com/emails'),
    'api_key': os.environ.get('RESEND_API_KEY', ''),
    'sender': os.environ.get('ALERT_SENDER', 'Bid Alerts <bidalerts@avi.mn>'),
    'timeout': int(os.environ.get('EMAIL_TIMEOUT', 30)),
    'outbox_dir': os.environ.get('ALERT_OUTBOX_DIR', os.path.join(BASE_DIR, 'data', 'emails')),
}

WEB_CONFIG = {
    'port': int(os.environ.get('PORT', 5003)),
    'debug': os.environ.get('FLASK_DEBUG', '0') == '1',
    'secret_key': os.environ.get('SECRET_KEY', 'bid-finder-secret-key-change-in-production'),
}

# Procurement pages scraped on every search
BID_SOURCES = [
    {'url': 'https://www.sfusd.edu/business-with-sfusd/current-invitations-bids', 'agency': 'San Francisco USD'},
    {'url': 'https://caleprocure.ca.gov/pages/public-search.aspx', 'agency': 'CaleProcure'},
]

DEFAULT_LOCATION = 'San Francisco, CA'
DEFAULT_COORDINATES = (37.7749, -122.4194)

# Static contractor profile used for match scoring
DEFAULT_CONTRACTOR_PROFILE = {
    'trades': [
        'General Construction',
        'Plumbing',
        'Roofing',
        'Field Work',
    ],
    'qualifications': [
        'Licensed Contractor',
        'Bonded',
    ],
    'preferred_budget_min': 10000,    # $10K
    'preferred_budget_max': 300000,   # $300K
}
