# bid-finder/tests/conftest.py
#
# Shared fixtures: contractor profile, bid factory, seeded randomness,
# and the Flask test client. The repository root is put on sys.path so
# tests can import `bid_finder` and `web` without installing the package.
#
import random
import sys
from pathlib import Path

import pytest

_repo_root = str(Path(__file__).resolve().parents[1])
if _repo_root not in sys.path:
    sys.path.insert(0, _repo_root)

from bid_finder.models import BidRecord, ContractorProfile  # noqa: E402
from bid_finder.selection import reset_selection_context  # noqa: E402


@pytest.fixture
def profile():
    return ContractorProfile(
        trades=['General Construction', 'Plumbing', 'Roofing', 'Field Work'],
        qualifications=['Licensed Contractor', 'Bonded'],
        preferred_budget_min=10000,
        preferred_budget_max=300000,
    )


@pytest.fixture
def make_bid():
    def _make_bid(title='Gym Roof Replacement Project', **kwargs):
        return BidRecord(title=title, **kwargs)
    return _make_bid


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture(autouse=True)
def fresh_selection_context():
    reset_selection_context()
    yield
    reset_selection_context()


@pytest.fixture
def client():
    from web.app import app
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client
