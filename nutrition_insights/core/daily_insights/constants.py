"""Daily insight constants.

Thresholds and voice rules shared by the
registry, analyzers, headline engine and response parser.
"""

from typing import Final

# Number of questions surfaced as suggestions.
SUGGESTED_QUESTION_LIMIT: Final[int] = 3

# Macro energy density (kcal per gram).
PROTEIN_KCAL_PER_GRAM: Final[int] = 4
CARB_KCAL_PER_GRAM: Final[int] = 4
FAT_KCAL_PER_GRAM: Final[int] = 9

# Balanced macro split: protein share of calories and fat share ceiling.
PROTEIN_SHARE_MIN: Final[int] = 20
PROTEIN_SHARE_MAX: Final[int] = 35
FAT_SHARE_MAX: Final[int] = 40

# Percent of target at which every macro counts as well covered.
MACRO_BALANCED_PERCENT: Final[int] = 80

# Protein trailing calories by more than this many points is lagging.
PROTEIN_LAG_POINTS: Final[int] = 15

# Calorie percent above which the day is over target.
OVER_TARGET_PERCENT: Final[int] = 110

# Pacing deviation (percentage points) tolerated before ahead/below pace.
PACING_TOLERANCE_POINTS: Final[int] = 15

# Protein per meal: minimum grams for a protein-supporting meal, and
# the max/min ratio above which distribution is uneven.
MIN_MEAL_PROTEIN_GRAMS: Final[int] = 20
UNEVEN_PROTEIN_RATIO: Final[int] = 3

# A gap between meals longer than this many hours is flagged.
MEAL_GAP_HOURS: Final[int] = 6

# A single meal above this share of daily calories dominates the day.
DOMINANT_MEAL_SHARE: Final[float] = 0.5

# Trend direction: minimum logged days and the steady band (percent).
TREND_MIN_LOGGED_DAYS: Final[int] = 5
TREND_WINDOW_DAYS: Final[int] = 3
TREND_STEADY_PERCENT: Final[int] = 5

# Today within this percent of the weekly average is a consistent day.
WEEKLY_CONSISTENT_PERCENT: Final[int] = 10

# Daily fiber target (grams) used when no personal target exists.
FIBER_TARGET_GRAMS: Final[int] = 28

# Calorie threshold below which a single logged meal is minimal data.
MINIMAL_DATA_CALORIES: Final[int] = 500

# Icon used for narratives when the model does not supply one.
DEFAULT_RESPONSE_ICON: Final[str] = "leaf-outline"

# Words the voice rules never allow in user-facing narrative.
BANNED_WORDS: Final[tuple[str, ...]] = (
    "failed",
    "cheated",
    "warning",
    "bad",
    "poor",
    "behind",
    "falling short",
)

# Softened alternatives applied when a model narrative uses a banned word.
BANNED_WORD_REPLACEMENTS: Final[dict[str, str]] = {
    "falling short": "coming in under",
    "failed": "fell short of",
    "cheated": "went off plan",
    "warning": "heads-up",
    "bad": "less ideal",
    "poor": "lower",
    "behind": "below",
}

# Narratives with more sentence terminators than this are truncated.
MAX_SENTENCE_TERMINATORS: Final[int] = 5
TRUNCATED_SENTENCE_COUNT: Final[int] = 3
