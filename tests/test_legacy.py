"""Tests for the legacy insights screen: rule-based cards, model replies and cache."""

import json
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, MutableClock
from nutrition_insights.core.daily_insights import InsightSource, ModelStatus, UserGoal
from nutrition_insights.core.daily_insights.enums import LegacyInsightCategory
from nutrition_insights.core.daily_insights.legacy import (
    CATEGORY_ICONS,
    build_legacy_prompt,
    generate_fallback_insights,
    get_empty_state_message,
    parse_legacy_response,
)
from nutrition_insights.core.daily_insights.models import LegacyInsight
from nutrition_insights.services.legacy_insights import LegacyInsightsStore


class TestFallbackInsights:
    """Tests for the rule-based cards."""

    def test_empty_day(self, make_data):
        data = make_data(today_meal_count=0, today_calories=0)

        insights = generate_fallback_insights(data)

        assert len(insights) == 1
        assert insights[0].category == LegacyInsightCategory.pattern
        assert insights[0].text.startswith("Just getting started today?")

    def test_new_user(self, make_data):
        insights = generate_fallback_insights(make_data(days_using_app=2))

        assert len(insights) == 1
        assert "over the next few days" in insights[0].text

    def test_base_day(self, make_data):
        insights = generate_fallback_insights(make_data())

        assert [i.category for i in insights] == [
            LegacyInsightCategory.consistency,
            LegacyInsightCategory.trend,
            LegacyInsightCategory.macro_balance,
        ]
        assert insights[0].text == "5-day logging streak. You're building momentum."
        assert insights[1].text.startswith(
            "You've landed within your calorie target 3 days in a row."
        )
        assert insights[2].text == (
            "Today's macros: 46% carbs, 25% protein, 29% fat, nicely balanced for your "
            "maintenance goal."
        )

    def test_weekly_average_well_below_target(self, make_data):
        data = make_data(avg_calories_7d=1700, logging_streak=0, calorie_streak=0)

        insights = generate_fallback_insights(data)

        assert insights[0].text.startswith("Your 7-day average is 300 calories below target.")

    def test_capped_at_three(self, make_data):
        data = make_data(
            today_protein=130,
            logging_streak=10,
            calorie_streak=5,
            today_water=2600,
        )

        assert len(generate_fallback_insights(data)) == 3

    def test_protein_nudge(self, make_data):
        data = make_data(today_protein=60, logging_streak=1, calorie_streak=0)

        insights = generate_fallback_insights(data)

        assert insights[0].category == LegacyInsightCategory.protein
        assert insights[0].text.startswith("You're at 60g protein so far.")

    def test_hydration_and_macros(self, make_data):
        data = make_data(
            logging_streak=0,
            calorie_streak=0,
            avg_calories_7d=1950,
            today_water=2600,
        )

        insights = generate_fallback_insights(data)

        assert [i.category for i in insights] == [
            LegacyInsightCategory.trend,
            LegacyInsightCategory.hydration,
            LegacyInsightCategory.macro_balance,
        ]
        assert insights[0].text.endswith("target zone for maintenance.")
        assert insights[1].text == "You've logged 2.6L of water today. Nicely hydrated."

    def test_light_day(self, make_data):
        data = make_data(
            today_calories=700,
            today_protein=40,
            today_carbs=80,
            today_fat=50,
            today_meal_count=1,
            today_water=0,
            logging_streak=0,
            calorie_streak=0,
            avg_calories_7d=0,
        )

        insights = generate_fallback_insights(data)

        assert [i.category for i in insights] == [LegacyInsightCategory.rest]
        assert insights[0].text.startswith("Lighter eating day today.")

    def test_icons_follow_category(self, make_data):
        for insight in generate_fallback_insights(make_data()):
            assert insight.icon == CATEGORY_ICONS[insight.category]

    def test_no_exclamation_marks(self, make_data):
        scenarios = [
            make_data(),
            make_data(logging_streak=10, today_protein=140),
            make_data(today_water=3000, calorie_streak=0, logging_streak=0),
        ]
        for data in scenarios:
            for insight in generate_fallback_insights(data):
                assert "!" not in insight.text


class TestEmptyState:
    """Tests for the insights screen empty state."""

    def test_new_user(self, make_data):
        title, _ = get_empty_state_message(make_data(days_using_app=1))

        assert title == "Building your profile..."

    def test_nothing_logged(self, make_data):
        title, _ = get_empty_state_message(make_data(today_meal_count=0))

        assert title == "Nothing logged yet today"

    def test_regular_day(self, make_data):
        assert get_empty_state_message(make_data()) is None


class TestLegacyPrompt:
    """Tests for the single JSON prompt."""

    def test_prompt_carries_snapshot_numbers(self, make_data):
        prompt = build_legacy_prompt(make_data(user_goal=UserGoal.gain))

        assert "- Goal: muscle gain" in prompt
        assert "- Today: 1500 cal (target: 2000), 100g protein (target: 150g)" in prompt
        assert "Oatmeal, Greek Yogurt, Chicken Salad, Brown Rice, Protein Bar" in prompt
        assert '{"insights": [{"category": "macro_balance"' in prompt

    def test_prompt_without_foods(self, make_data):
        prompt = build_legacy_prompt(make_data(today_foods=[]))

        assert "- Foods today: No foods logged yet" in prompt


class TestParseLegacyResponse:
    """Tests for reading cards out of a model reply."""

    def test_reads_json_surrounded_by_prose(self):
        reply = (
            "Here you go:\n"
            + json.dumps(
                {
                    "insights": [
                        {"category": "protein", "text": "Protein is pacing well."},
                        {"category": "hydration", "text": " Water is on track. "},
                    ]
                }
            )
            + "\nHope that helps."
        )

        insights = parse_legacy_response(reply)

        assert insights == [
            LegacyInsight(
                category=LegacyInsightCategory.protein,
                text="Protein is pacing well.",
                icon=CATEGORY_ICONS[LegacyInsightCategory.protein],
            ),
            LegacyInsight(
                category=LegacyInsightCategory.hydration,
                text="Water is on track.",
                icon=CATEGORY_ICONS[LegacyInsightCategory.hydration],
            ),
        ]

    def test_skips_invalid_entries(self):
        reply = json.dumps(
            {
                "insights": [
                    "not an object",
                    {"category": "astrology", "text": "Mercury is in retrograde."},
                    {"category": "trend", "text": ""},
                    {"category": "trend", "text": "Calories are steady this week."},
                ]
            }
        )

        insights = parse_legacy_response(reply)

        assert [i.text for i in insights] == ["Calories are steady this week."]

    def test_caps_at_three(self):
        reply = json.dumps(
            {"insights": [{"category": "pattern", "text": f"Card {n}."} for n in range(5)]}
        )

        assert len(parse_legacy_response(reply)) == 3

    @pytest.mark.parametrize(
        "reply",
        ["", "No JSON here.", "{not json}", '{"insights": "none"}', "[1, 2]"],
    )
    def test_unusable_replies(self, reply):
        assert parse_legacy_response(reply) == []


class TestLegacyInsightsStore:
    """Tests for the legacy insights cache."""

    @pytest.fixture
    def store(self, clock) -> LegacyInsightsStore:
        return LegacyInsightsStore(clock=clock, ttl_hours=4)

    @pytest.fixture
    def insights(self, make_data) -> list[LegacyInsight]:
        return generate_fallback_insights(make_data())

    def test_regenerate_when_empty(self, store):
        assert store.should_regenerate()

    def test_valid_until_is_still_valid(self, store, insights):
        cached = store.set_insights(insights, InsightSource.fallback)

        assert cached.valid_until == FIXED_NOW + timedelta(hours=4)
        assert not store.should_regenerate(now=cached.valid_until)
        assert store.should_regenerate(now=cached.valid_until + timedelta(milliseconds=1))

    def test_regenerate_on_new_day(self, store, insights, clock: MutableClock):
        store.set_insights(insights, InsightSource.fallback)
        clock.advance(hours=10, minutes=1)

        assert store.should_regenerate()

    def test_set_insights_ends_generation(self, store, insights):
        store.set_is_generating(True)

        store.set_insights(insights, InsightSource.llm)

        assert not store.is_generating
        assert store.cached_insights.source == InsightSource.llm
        assert store.cached_insights.date == "2026-03-10"

    def test_generation_error_ends_generation(self, store):
        store.set_is_generating(True)

        store.set_generation_error("Model failed to load")

        assert not store.is_generating
        assert store.generation_error == "Model failed to load"

    def test_persistence_keeps_cards_and_flag_only(self, store, insights, clock):
        store.set_insights(insights, InsightSource.fallback)
        store.set_llm_enabled(False)
        store.set_llm_status(ModelStatus.ready)
        store.set_generation_error("Model failed to load")

        restored = LegacyInsightsStore(clock=clock)
        restored.load_persisted(store.to_persisted())

        assert restored.cached_insights == store.cached_insights
        assert restored.llm_enabled is False
        assert restored.llm_status == ModelStatus.not_downloaded
        assert restored.generation_error is None

    def test_clear_insights(self, store, insights):
        store.set_insights(insights, InsightSource.fallback)

        store.clear_insights()

        assert store.cached_insights is None
        assert store.should_regenerate()
