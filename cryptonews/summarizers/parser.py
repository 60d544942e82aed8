"""
Parser for the sectioned briefing format requested from the language model.

The response is read line by line. A line starting with one of the upper-case
section headers (TITLE, SUMMARY, BULLET_POINTS, SENTIMENT) switches the
current section; any other line, including "Sentiment: ..." prose, is added to
the current section. Lines before the first header are ignored. Only the first
occurrence of each header counts, except that a SENTIMENT section without a
recognized value is replaced by a later one.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cryptonews.errors import GenerationError

DEFAULT_TITLE = 'Daily Crypto Market Update'
DEFAULT_SENTIMENT = 'neutral'
SUMMARY_FALLBACK_LENGTH = 500

TITLE = 'TITLE'
SUMMARY = 'SUMMARY'
BULLET_POINTS = 'BULLET_POINTS'
SENTIMENT = 'SENTIMENT'

# Tolerates markdown decoration such as "**TITLE:**" or "## SUMMARY:".
# Header names are matched case-sensitively.
HEADER_PATTERN = re.compile(r'^[\s#*]*(TITLE|SUMMARY|BULLET_POINTS|SENTIMENT)[\s*]*:[\s*]*(.*)$')
SENTIMENT_PATTERN = re.compile(r'^[\s\[(*"\']*(bullish|bearish|neutral)\b', re.IGNORECASE)
BULLET_MARKER = re.compile(r'^-\s*')


@dataclass
class BriefingSections:
    title: str
    summary: str
    sentiment: str
    bullet_points: List[str] = field(default_factory=list)


def split_sections(text: str) -> Dict[str, List[str]]:
    """
    Run the header state machine over the response.

    Returns:
        Mapping of section name to its lines, for the sections present
    """
    sections: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in text.splitlines():
        match = HEADER_PATTERN.match(line)
        if match:
            name = match.group(1)
            if name in sections and not (name == SENTIMENT and _sentiment_value(sections[name]) is None):
                current = None
                continue
            current = name
            sections[current] = []
            inline = match.group(2).strip()
            if inline:
                sections[current].append(inline)
        elif current is not None:
            sections[current].append(line)

    return sections


def _first_line(lines: List[str]) -> Optional[str]:
    for line in lines:
        if line.strip():
            return line.strip()
    return None


def _parse_bullets(lines: List[str]) -> List[str]:
    bullets = []
    for line in lines:
        stripped = line.strip()
        if not stripped.startswith('-'):
            continue
        point = BULLET_MARKER.sub('', stripped).strip()
        if point:
            bullets.append(point)
    return bullets


def _sentiment_value(lines: List[str]) -> Optional[str]:
    value = _first_line(lines)
    if value:
        match = SENTIMENT_PATTERN.match(value)
        if match:
            return match.group(1).lower()
    return None


def _parse_sentiment(lines: List[str]) -> str:
    return _sentiment_value(lines) or DEFAULT_SENTIMENT


def parse_briefing_response(text: Optional[str]) -> BriefingSections:
    """
    Extract title, summary, bullet points and sentiment from a response.

    Missing sections fall back to defaults: the default title, the first 500
    characters of the response, no bullet points and a neutral sentiment.

    Raises:
        GenerationError: If the response is empty
    """
    if not text or not text.strip():
        raise GenerationError("Empty response from language model")

    sections = split_sections(text)

    title = _first_line(sections.get(TITLE, [])) or DEFAULT_TITLE

    summary = '\n'.join(sections.get(SUMMARY, [])).strip()
    if not summary:
        summary = text[:SUMMARY_FALLBACK_LENGTH].strip()

    sentiment = _parse_sentiment(sections.get(SENTIMENT, []))
    return BriefingSections(
        title=title,
        summary=summary,
        sentiment=sentiment,
        bullet_points=_parse_bullets(sections.get(BULLET_POINTS, [])),
    )
