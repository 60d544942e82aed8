"""
Briefing data model for CryptoNews.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

SENTIMENTS = ('bullish', 'bearish', 'neutral')
FALLBACK_MODEL = 'fallback-template'


@dataclass(frozen=True)
class Briefing:
    """
    A daily market briefing, produced by the language model or by the
    rule-based fallback. Both paths fill every field.
    """
    title: str
    summary: str
    sentiment: str
    generated_at: str
    model: str
    bullet_points: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.sentiment not in SENTIMENTS:
            raise ValueError(f"Invalid sentiment: {self.sentiment!r}")

    @property
    def is_fallback(self) -> bool:
        return self.model == FALLBACK_MODEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'summary': self.summary,
            'bulletPoints': list(self.bullet_points),
            'sentiment': self.sentiment,
            'generatedAt': self.generated_at,
            'model': self.model,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Briefing":
        return cls(
            title=data['title'],
            summary=data['summary'],
            bullet_points=list(data.get('bulletPoints') or []),
            sentiment=data.get('sentiment', 'neutral'),
            generated_at=data.get('generatedAt', ''),
            model=data.get('model', ''),
        )
