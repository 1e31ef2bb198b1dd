"""Daily insight enums.

Shared vocabularies for questions, cards, sources and model status.
"""

from enum import StrEnum, auto


class QuestionCategory(StrEnum):
    """Grouping of questions shown together in the question picker."""

    macro_balance = auto()
    protein_focus = auto()
    meal_balance = auto()
    hydration = auto()
    trends = auto()
    nutrient_gaps = auto()


class QuestionId(StrEnum):
    """Identifier of every question in the catalog, in catalog order."""

    macro_overview = auto()
    calorie_pacing = auto()
    macro_ratio = auto()
    remaining_budget = auto()
    protein_status = auto()
    protein_per_meal = auto()
    protein_remaining = auto()
    meal_distribution = auto()
    meal_timing = auto()
    meal_variety = auto()
    hydration_status = auto()
    hydration_pacing = auto()
    vs_weekly_avg = auto()
    consistency_check = auto()
    trend_direction = auto()
    nutrient_overview = auto()
    fiber_check = auto()
    micronutrient_status = auto()


class CardStatus(StrEnum):
    """Visual status of a data card."""

    on_track = auto()
    ahead = auto()
    behind = auto()
    neutral = auto()


class InsightSource(StrEnum):
    """Where a narrative came from.

    ``llm`` narratives were written by the on-device model and passed
    response validation. ``fallback`` narratives are the deterministic
    analyzer text.
    """

    llm = auto()
    fallback = auto()


class UserGoal(StrEnum):
    """Weight goal declared by the user."""

    lose = auto()
    maintain = auto()
    gain = auto()


class AlertSeverity(StrEnum):
    """Severity of a nutrient deficiency alert, most urgent last."""

    notice = auto()
    warning = auto()
    concern = auto()


class ModelStatus(StrEnum):
    """Lifecycle state of the on-device language model."""

    not_downloaded = auto()
    downloading = auto()
    loading = auto()
    ready = auto()
    error = auto()
    unsupported = auto()


class LegacyInsightCategory(StrEnum):
    """Category of a card on the original insights screen."""

    macro_balance = auto()
    protein = auto()
    consistency = auto()
    pattern = auto()
    trend = auto()
    hydration = auto()
    timing = auto()
    rest = auto()
