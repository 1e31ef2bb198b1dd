"""Nutrient catalog.

Daily targets, alert tiers and food sources for the nutrients tracked
by the deficiency calculator. Targets are adult reference intakes.
Tier 1 nutrients alert at any severity, tier 2 only at warning or
concern, tier 3 never alert and only appear in the weekly summary.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class NutrientConfig:
    """Static description of one tracked nutrient."""

    id: str
    name: str
    unit: str
    rda_default: float
    tier: int
    food_sources: tuple[str, ...]


NUTRIENT_CONFIGS: Final[tuple[NutrientConfig, ...]] = (
    NutrientConfig(
        id="vitamin_d",
        name="Vitamin D",
        unit="mcg",
        rda_default=15,
        tier=1,
        food_sources=("salmon", "fortified milk", "eggs", "mushrooms", "sardines"),
    ),
    NutrientConfig(
        id="vitamin_b12",
        name="Vitamin B12",
        unit="mcg",
        rda_default=2.4,
        tier=1,
        food_sources=("clams", "beef", "fortified cereal", "yogurt", "tuna"),
    ),
    NutrientConfig(
        id="iron",
        name="Iron",
        unit="mg",
        rda_default=18,
        tier=1,
        food_sources=("spinach", "lentils", "red meat", "fortified cereal", "tofu"),
    ),
    NutrientConfig(
        id="calcium",
        name="Calcium",
        unit="mg",
        rda_default=1000,
        tier=1,
        food_sources=("yogurt", "cheese", "fortified plant milk", "sardines", "kale"),
    ),
    NutrientConfig(
        id="magnesium",
        name="Magnesium",
        unit="mg",
        rda_default=400,
        tier=2,
        food_sources=("pumpkin seeds", "almonds", "spinach", "black beans", "dark chocolate"),
    ),
    NutrientConfig(
        id="zinc",
        name="Zinc",
        unit="mg",
        rda_default=11,
        tier=2,
        food_sources=("oysters", "beef", "pumpkin seeds", "chickpeas", "cashews"),
    ),
    NutrientConfig(
        id="potassium",
        name="Potassium",
        unit="mg",
        rda_default=3400,
        tier=2,
        food_sources=("potatoes", "bananas", "beans", "avocado", "spinach"),
    ),
    NutrientConfig(
        id="folate",
        name="Folate",
        unit="mcg",
        rda_default=400,
        tier=2,
        food_sources=("lentils", "asparagus", "spinach", "chickpeas", "broccoli"),
    ),
    NutrientConfig(
        id="omega_3",
        name="Omega-3",
        unit="g",
        rda_default=1.6,
        tier=2,
        food_sources=("salmon", "walnuts", "chia seeds", "flaxseed", "sardines"),
    ),
    NutrientConfig(
        id="fiber",
        name="Fiber",
        unit="g",
        rda_default=28,
        tier=2,
        food_sources=("beans", "oats", "raspberries", "whole grains", "lentils"),
    ),
    NutrientConfig(
        id="vitamin_a",
        name="Vitamin A",
        unit="mcg",
        rda_default=900,
        tier=3,
        food_sources=("sweet potato", "carrots", "spinach", "cantaloupe"),
    ),
    NutrientConfig(
        id="vitamin_c",
        name="Vitamin C",
        unit="mg",
        rda_default=90,
        tier=3,
        food_sources=("oranges", "bell peppers", "strawberries", "broccoli", "kiwi"),
    ),
)

_CONFIGS_BY_ID: Final[dict[str, NutrientConfig]] = {c.id: c for c in NUTRIENT_CONFIGS}

# Tiers that can raise alerts.
ALERTABLE_TIERS: Final[frozenset[int]] = frozenset({1, 2})


def get_nutrient(nutrient_id: str) -> NutrientConfig | None:
    """Look up a nutrient by id, None if it is not tracked."""
    return _CONFIGS_BY_ID.get(nutrient_id)


def get_alertable_nutrients() -> list[NutrientConfig]:
    """Nutrients that can raise deficiency alerts, in catalog order."""
    return [config for config in NUTRIENT_CONFIGS if config.tier in ALERTABLE_TIERS]


def get_food_suggestions(nutrient_id: str, limit: int = 4) -> list[str]:
    """Foods rich in a nutrient, at most ``limit`` of them."""
    config = _CONFIGS_BY_ID.get(nutrient_id)
    if config is None:
        return []
    return list(config.food_sources[:limit])
