"""Tests for model narrative validation and prompt construction."""

from nutrition_insights.core.daily_insights import (
    build_question_prompt,
    build_system_prompt,
    parse_insight_response,
)
from nutrition_insights.core.daily_insights.constants import BANNED_WORDS
from nutrition_insights.core.daily_insights.prompts import build_full_prompt
from nutrition_insights.core.daily_insights.response_parser import ValidationIssueKind


class TestParseInsightResponse:
    """Tests for parse_insight_response."""

    def test_clean_narrative_passes_through(self):
        parsed = parse_insight_response(
            "Protein is at 67% of your target. A protein-rich dinner could close the gap."
        )

        assert parsed.narrative == (
            "Protein is at 67% of your target. A protein-rich dinner could close the gap."
        )
        assert parsed.issues == []
        assert parsed.glyph is None
        assert parsed.icon == "leaf-outline"
        assert parsed.is_usable

    def test_leading_emoji_is_split_off(self):
        parsed = parse_insight_response("\U0001F957 Nice work on protein today.")

        assert parsed.glyph == "\U0001F957"
        assert parsed.narrative == "Nice work on protein today."

    def test_wrapping_quotes_are_removed(self):
        parsed = parse_insight_response('"Water is on track today."')

        assert parsed.narrative == "Water is on track today."

    def test_long_answer_truncated_to_three_sentences(self):
        raw = "One. Two. Three. Four. Five. Six."

        parsed = parse_insight_response(raw)

        assert parsed.narrative == "One. Two. Three."
        assert parsed.issues[0].kind == ValidationIssueKind.truncated

    def test_five_terminators_are_kept(self):
        raw = "One. Two. Three. Four. Five."

        assert parse_insight_response(raw).narrative == raw

    def test_decimal_points_do_not_end_sentences(self):
        raw = (
            "Protein is at 67.5% of your target. Fiber sits at 12.5g. "
            "Water is at 1.2 of 2.0 liters. Iron is at 4.5mg."
        )

        parsed = parse_insight_response(raw)

        assert parsed.narrative == raw
        assert parsed.issues == []

    def test_truncation_keeps_decimals_whole(self):
        raw = "Protein is at 67.5%. Two. Three. Four. Five. Six."

        parsed = parse_insight_response(raw)

        assert parsed.narrative == "Protein is at 67.5%. Two. Three."

    def test_banned_words_are_softened(self):
        parsed = parse_insight_response("You are behind on water. Bad timing for a poor lunch.")

        assert parsed.narrative == (
            "You are below on water. Less ideal timing for a lower lunch."
        )
        kinds = [issue.kind for issue in parsed.issues]
        assert kinds.count(ValidationIssueKind.banned_word) == 3

    def test_banned_phrase_is_softened(self):
        parsed = parse_insight_response("Fiber is falling short today.")

        assert parsed.narrative == "Fiber is coming in under today."

    def test_banned_word_inside_other_word_is_left_alone(self):
        parsed = parse_insight_response("Badminton burns calories.")

        assert parsed.narrative == "Badminton burns calories."
        assert parsed.issues == []

    def test_exclamations_become_periods(self):
        parsed = parse_insight_response("Great hydration today!! Keep it up!")

        assert parsed.narrative == "Great hydration today. Keep it up."
        assert parsed.issues[-1].kind == ValidationIssueKind.exclamation

    def test_emoji_only_reply_is_unusable(self):
        parsed = parse_insight_response("\U0001F957")

        assert parsed.narrative == ""
        assert not parsed.is_usable


class TestPrompts:
    """Tests for the narrative prompts."""

    def test_system_prompt_lists_every_banned_word(self):
        prompt = build_system_prompt()

        for word in BANNED_WORDS:
            assert f'"{word}"' in prompt
        assert "2-3 short sentences" in prompt

    def test_question_prompt_embeds_data_block_verbatim(self):
        data_block = "PROTEIN STATUS:\nToday: 100g of 150g (67%)"

        prompt = build_question_prompt("How is my protein today?", data_block)

        assert prompt.startswith("QUESTION: How is my protein today?")
        assert f"DATA:\n{data_block}\n" in prompt

    def test_full_prompt_joins_both(self):
        prompt = build_full_prompt("Q?", "DATA LINE")

        assert prompt.startswith(build_system_prompt())
        assert prompt.endswith(build_question_prompt("Q?", "DATA LINE"))
