"""
Bid parser for scraped procurement pages.

Scraped pages arrive as markdown. Bid listings are tables or lists where
a project heading ("Gym Roof Replacement Project, Project No. 4521") is
followed by rows with dates, a link to the bid notice, and a description.
The parser walks the page line by line as a two-state machine:

    Idle           no bid open; heading lines open one
    Accumulating   a bid is open; every line is scanned for its details

A new heading flushes the open bid, and so does the end of input. This is
best-effort pattern matching: pages with unexpected structure give fewer
or emptier records, never an error.
"""

import re
import logging
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from .config import DEFAULT_LOCATION
from .locations import resolve_location
from .models import BidRecord

logger = logging.getLogger(__name__)

# Heading text up to the next table cell separator
HEADING_PATTERN = re.compile(
    r'([^|]+(?:School|Project|Elementary|High School|Middle School)[^|]*?)'
    r'(?:,?\s*Project\s*(?:No\.?|#)?\s*:?\s*(\d+))?',
    re.IGNORECASE
)
PROJECT_NUMBER_PATTERN = re.compile(r'Project\s*(?:No\.?|#)?\s*:?\s*(\d+)', re.IGNORECASE)
DATE_PATTERN = re.compile(r'(\d{1,2}/\d{1,2}/\d{4})')
NOTICE_LINK_PATTERN = re.compile(r'\[[^\]]*(?:Notice|PDF)[^\]]*\]\((https?://[^)\s]+)\)', re.IGNORECASE)
TRAILING_DASH_PATTERN = re.compile(r'[-–—]\s*$')

# (substrings, trade label); each entry is checked independently per line
TRADE_KEYWORDS = [
    (('plumbing',), 'Plumbing'),
    (('electrical',), 'Electrical'),
    (('hvac',), 'HVAC'),
    (('roofing',), 'Roofing'),
    (('construction',), 'General Construction'),
    (('field',), 'Field Work'),
    (('pa system', 'pa upgrade'), 'Electrical'),
    (('green', 'landscap'), 'Landscaping'),
]


@dataclass(frozen=True)
class Idle:
    """No bid is open."""


@dataclass
class Accumulating:
    """A bid is open and collecting details from following lines."""
    bid: BidRecord


ParserState = Union[Idle, Accumulating]


def is_heading(line: str) -> bool:
    return ('Project' in line or 'School' in line) and HEADING_PATTERN.search(line) is not None


def detect_trades(line: str) -> List[str]:
    """Trade labels for every keyword found in the line (may repeat)."""
    lowered = line.lower()
    return [label for keywords, label in TRADE_KEYWORDS
            if any(keyword in lowered for keyword in keywords)]


class BidParser:
    """Turns one scraped page into BidRecords for a single agency."""

    def __init__(self, source_url: str, agency: str, resolve_locations: bool = True,
                 rng: Optional[random.Random] = None):
        self.source_url = source_url
        self.agency = agency
        self.resolve_locations = resolve_locations
        self.rng = rng

    def open_bid(self, line: str) -> BidRecord:
        """Start a new bid from a heading line."""
        heading = HEADING_PATTERN.search(line)
        number = PROJECT_NUMBER_PATTERN.search(line)
        title = TRAILING_DASH_PATTERN.sub('', heading.group(1)).strip()
        return BidRecord(
            title=title,
            bid_number=number.group(1) if number else '',
            agency=self.agency,
            source_url=self.source_url,
            trades=[],
            location=DEFAULT_LOCATION,
        )

    @staticmethod
    def absorb(bid: BidRecord, line: str):
        """Collect due date, notice link, and trades from a line into the open bid."""
        if not bid.due_date:
            dates = DATE_PATTERN.findall(line)
            if dates:
                bid.due_date = dates[-1]

        if not bid.pdf_url:
            link = NOTICE_LINK_PATTERN.search(line)
            if link:
                bid.pdf_url = link.group(1)

        bid.trades.extend(detect_trades(line))

    def step(self, state: ParserState, line: str) -> Tuple[ParserState, Optional[BidRecord]]:
        """
        Advance the state machine by one line.
        Returns the new state and the bid flushed by this line, if any.
        """
        emitted = None
        if is_heading(line):
            if isinstance(state, Accumulating) and state.bid.title:
                emitted = state.bid
            state = Accumulating(self.open_bid(line))
            logger.debug(f"Opened bid: {state.bid.title}")

        # The heading line itself is also scanned for details
        if isinstance(state, Accumulating):
            self.absorb(state.bid, line)

        return state, emitted

    @staticmethod
    def finish(state: ParserState) -> Optional[BidRecord]:
        """Flush whatever bid is still open at end of input."""
        if isinstance(state, Accumulating) and state.bid.title:
            return state.bid
        return None

    def finalize(self, bid: BidRecord) -> BidRecord:
        bid.normalize()
        if self.resolve_locations:
            bid.latitude, bid.longitude = resolve_location(bid.location, bid.agency, self.rng)
        return bid

    def parse_lines(self, lines: Iterable[str]) -> List[BidRecord]:
        bids = []
        state: ParserState = Idle()
        for line in lines:
            state, emitted = self.step(state, line)
            if emitted:
                bids.append(emitted)
        last = self.finish(state)
        if last:
            bids.append(last)
        return [self.finalize(bid) for bid in bids]

    def parse(self, raw_text: str) -> List[BidRecord]:
        if not raw_text:
            return []
        bids = self.parse_lines(raw_text.split('\n'))
        logger.info(f"Parsed {len(bids)} bids from {self.source_url}")
        return bids


def parse_bids(raw_text: str, source_url: str, agency: str,
               resolve_locations: bool = True, rng: Optional[random.Random] = None) -> List[BidRecord]:
    """Parse scraped markdown into bid records."""
    parser = BidParser(source_url, agency, resolve_locations=resolve_locations, rng=rng)
    return parser.parse(raw_text)
