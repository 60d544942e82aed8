"""Tests for cryptonews.summarizers.parser."""

import pytest

from cryptonews.errors import GenerationError
from cryptonews.summarizers.parser import (
    DEFAULT_TITLE,
    parse_briefing_response,
    split_sections,
)

FULL_RESPONSE = """TITLE: Bitcoin Leads Broad Rally as ETF Inflows Surge

SUMMARY:
Bitcoin pushed higher overnight as spot ETF inflows hit a monthly record.

Altcoins followed, with SOL and ADA posting double-digit gains.

BULLET_POINTS:
- ETF inflows reached a monthly high
- SOL up 12% on the day
-   Funding rates remain moderate
-
Not a bullet line

SENTIMENT: Bullish
"""


class TestParseBriefingResponse:
    def test_extracts_all_sections(self) -> None:
        result = parse_briefing_response(FULL_RESPONSE)

        assert result.title == "Bitcoin Leads Broad Rally as ETF Inflows Surge"
        assert result.summary == (
            "Bitcoin pushed higher overnight as spot ETF inflows hit a monthly record.\n\n"
            "Altcoins followed, with SOL and ADA posting double-digit gains."
        )
        assert result.bullet_points == [
            "ETF inflows reached a monthly high",
            "SOL up 12% on the day",
            "Funding rates remain moderate",
        ]
        assert result.sentiment == "bullish"

    def test_missing_sentiment_defaults_to_neutral(self) -> None:
        text = FULL_RESPONSE.replace("SENTIMENT: Bullish", "")
        assert parse_briefing_response(text).sentiment == "neutral"

    def test_unrecognized_sentiment_defaults_to_neutral(self) -> None:
        text = FULL_RESPONSE.replace("SENTIMENT: Bullish", "SENTIMENT: mixed")
        assert parse_briefing_response(text).sentiment == "neutral"

    def test_bracketed_sentiment(self) -> None:
        text = FULL_RESPONSE.replace("SENTIMENT: Bullish", "SENTIMENT: [bearish]")
        assert parse_briefing_response(text).sentiment == "bearish"

    def test_missing_bullet_points_yields_empty_list(self) -> None:
        text = "TITLE: Quiet Day\n\nSUMMARY:\nNothing happened.\n\nSENTIMENT: neutral\n"
        result = parse_briefing_response(text)
        assert result.bullet_points == []
        assert result.summary == "Nothing happened."

    def test_missing_title_uses_default(self) -> None:
        text = "SUMMARY:\nMarkets drifted.\n\nSENTIMENT: neutral"
        assert parse_briefing_response(text).title == DEFAULT_TITLE

    def test_missing_summary_uses_raw_text(self) -> None:
        text = "Markets drifted sideways. " * 40
        result = parse_briefing_response(text)
        assert result.summary == text[:500].strip()
        assert result.title == DEFAULT_TITLE
        assert result.bullet_points == []
        assert result.sentiment == "neutral"

    def test_title_on_following_line(self) -> None:
        text = "TITLE:\nMarkets Catch Their Breath\nSUMMARY:\nCalm day."
        assert parse_briefing_response(text).title == "Markets Catch Their Breath"

    def test_markdown_decorated_headers(self) -> None:
        text = (
            "Here is your briefing:\n\n"
            "**TITLE:** Ether Outperforms\n\n"
            "## SUMMARY:\nEther gained against bitcoin.\n\n"
            "**BULLET_POINTS:**\n- ETH/BTC up 3%\n\n"
            "**SENTIMENT:** bullish"
        )
        result = parse_briefing_response(text)
        assert result.title == "Ether Outperforms"
        assert result.summary == "Ether gained against bitcoin."
        assert result.bullet_points == ["ETH/BTC up 3%"]
        assert result.sentiment == "bullish"

    def test_sentiment_prose_inside_summary_is_not_a_header(self) -> None:
        text = (
            "TITLE: Bitcoin Climbs\n"
            "SUMMARY:\n"
            "Bitcoin climbed 4% overnight.\n"
            "Sentiment: traders turned risk-on after the CPI print.\n"
            "Altcoins followed.\n\n"
            "BULLET_POINTS:\n- BTC up 4%\n\n"
            "SENTIMENT: bullish"
        )
        result = parse_briefing_response(text)

        assert result.summary == (
            "Bitcoin climbed 4% overnight.\n"
            "Sentiment: traders turned risk-on after the CPI print.\n"
            "Altcoins followed."
        )
        assert result.bullet_points == ["BTC up 4%"]
        assert result.sentiment == "bullish"

    def test_title_prose_inside_summary_is_kept(self) -> None:
        text = "TITLE: Real Title\nSUMMARY:\nTitle: a 13F filing showed new buyers.\nSENTIMENT: neutral"
        result = parse_briefing_response(text)

        assert result.title == "Real Title"
        assert result.summary == "Title: a 13F filing showed new buyers."

    def test_later_sentiment_replaces_unrecognized_one(self) -> None:
        text = "TITLE: Mixed Day\nSUMMARY:\nChop.\nSENTIMENT: mixed\nSENTIMENT: bearish"
        assert parse_briefing_response(text).sentiment == "bearish"

    def test_recognized_sentiment_is_not_replaced(self) -> None:
        text = "TITLE: Mixed Day\nSUMMARY:\nChop.\nSENTIMENT: bullish\nSENTIMENT: bearish"
        assert parse_briefing_response(text).sentiment == "bullish"

    def test_sentiment_value_is_case_insensitive(self) -> None:
        text = "TITLE: Upper\nSUMMARY:\nParsed.\nSENTIMENT: BEARISH"
        assert parse_briefing_response(text).sentiment == "bearish"

    @pytest.mark.parametrize("text", ["", "   \n\n", None])
    def test_empty_response_raises(self, text) -> None:
        with pytest.raises(GenerationError):
            parse_briefing_response(text)


class TestSplitSections:
    def test_ignores_preamble(self) -> None:
        sections = split_sections("Sure! Here it is.\nTITLE: Headline\n")
        assert sections == {"TITLE": ["Headline"]}

    def test_first_occurrence_of_header_wins(self) -> None:
        sections = split_sections("TITLE: First\nSUMMARY:\nOne.\nTITLE: Second\nstray line\nSENTIMENT: neutral")
        assert sections["TITLE"] == ["First"]
        assert sections["SUMMARY"] == ["One."]
        assert sections["SENTIMENT"] == ["neutral"]
