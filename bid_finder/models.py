"""
Data model for Bid Finder.

A BidRecord is created fresh for every search and is never persisted.
Search results only carry the listing fields; the extended fields are
filled in once the bid's notice PDF has been run through document
extraction, at which point ``analyzed`` is set.
"""

from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONTRACTOR_PROFILE


def as_str(value: Any) -> str:
    """Coerce a loosely typed extraction value to a string."""
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def as_str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [as_str(v) for v in value if v]


@dataclass
class BidAsk:
    summary: str = ''
    deliverables: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['BidAsk']:
        if not isinstance(data, dict):
            return None
        return cls(summary=as_str(data.get('summary')),
                   deliverables=as_str_list(data.get('deliverables')))


@dataclass
class PayTerms:
    estimated_budget: str = ''
    payment_terms: str = ''
    retainage: str = ''

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['PayTerms']:
        if not isinstance(data, dict):
            return None
        return cls(estimated_budget=as_str(data.get('estimated_budget')),
                   payment_terms=as_str(data.get('payment_terms')),
                   retainage=as_str(data.get('retainage')))


@dataclass
class ContractLength:
    duration: str = ''
    start_date: str = ''
    end_date: str = ''
    milestones: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['ContractLength']:
        if not isinstance(data, dict):
            return None
        return cls(duration=as_str(data.get('duration')),
                   start_date=as_str(data.get('start_date')),
                   end_date=as_str(data.get('end_date')),
                   milestones=as_str_list(data.get('milestones')))


@dataclass
class TerminationClauses:
    for_cause: str = ''
    for_convenience: str = ''
    notice_period: str = ''

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['TerminationClauses']:
        if not isinstance(data, dict):
            return None
        return cls(for_cause=as_str(data.get('for_cause')),
                   for_convenience=as_str(data.get('for_convenience')),
                   notice_period=as_str(data.get('notice_period')))


@dataclass
class BidRecord:
    """A single bid opportunity extracted from a procurement page."""
    title: str
    bid_number: str = ''
    agency: str = ''
    due_date: str = ''
    estimated_budget: str = ''
    trades: List[str] = field(default_factory=list)
    location: str = ''
    pdf_url: str = ''
    source_url: str = ''
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Populated by document extraction
    analyzed: bool = False
    scope_summary: str = ''
    bid_ask: Optional[BidAsk] = None
    pay: Optional[PayTerms] = None
    contract_length: Optional[ContractLength] = None
    hard_requirements: List[str] = field(default_factory=list)
    soft_requirements: List[str] = field(default_factory=list)
    termination_clauses: Optional[TerminationClauses] = None
    trades_required: Optional[List[str]] = None

    STRING_FIELDS = ('title', 'bid_number', 'agency', 'due_date', 'estimated_budget',
                     'location', 'pdf_url', 'source_url', 'scope_summary')

    def normalize(self) -> 'BidRecord':
        """Replace empty/None string fields with '' and dedupe trades, in place."""
        for name in self.STRING_FIELDS:
            if not getattr(self, name):
                setattr(self, name, '')
        self.trades = dedupe(self.trades or [])
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_summary_dict(self) -> Dict[str, Any]:
        """Listing fields only, as returned by the search entry point."""
        return {
            'title': self.title,
            'bid_number': self.bid_number,
            'agency': self.agency,
            'due_date': self.due_date,
            'estimated_budget': self.estimated_budget,
            'trades': list(self.trades),
            'location': self.location,
            'pdf_url': self.pdf_url,
            'source_url': self.source_url,
            'latitude': self.latitude,
            'longitude': self.longitude,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BidRecord':
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and k != 'score'}
        for name in cls.STRING_FIELDS:
            values[name] = as_str(values.get(name))
        for name in ('trades', 'hard_requirements', 'soft_requirements'):
            values[name] = as_str_list(values.get(name))
        if values.get('trades_required') is not None:
            values['trades_required'] = as_str_list(values['trades_required'])
        values['bid_ask'] = BidAsk.from_dict(values.get('bid_ask'))
        values['pay'] = PayTerms.from_dict(values.get('pay'))
        values['contract_length'] = ContractLength.from_dict(values.get('contract_length'))
        values['termination_clauses'] = TerminationClauses.from_dict(values.get('termination_clauses'))
        return cls(**values).normalize()


@dataclass
class ScoredBidRecord(BidRecord):
    """A bid with its 0-100 match score attached."""
    score: int = 0

    @classmethod
    def from_bid(cls, bid: BidRecord, score: int) -> 'ScoredBidRecord':
        values = {f.name: getattr(bid, f.name) for f in fields(BidRecord)}
        return cls(score=score, **values)

    def to_summary_dict(self) -> Dict[str, Any]:
        data = super().to_summary_dict()
        data['score'] = self.score
        return data


@dataclass
class ContractorProfile:
    """Contractor trades, qualifications, and preferred budget range (inclusive)."""
    trades: List[str] = field(default_factory=list)
    qualifications: List[str] = field(default_factory=list)
    preferred_budget_min: float = 0
    preferred_budget_max: float = 0

    @classmethod
    def default(cls) -> 'ContractorProfile':
        return cls(
            trades=list(DEFAULT_CONTRACTOR_PROFILE['trades']),
            qualifications=list(DEFAULT_CONTRACTOR_PROFILE['qualifications']),
            preferred_budget_min=DEFAULT_CONTRACTOR_PROFILE['preferred_budget_min'],
            preferred_budget_max=DEFAULT_CONTRACTOR_PROFILE['preferred_budget_max'],
        )


def dedupe(items: List[str]) -> List[str]:
    """Drop duplicates, keeping first occurrence order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
