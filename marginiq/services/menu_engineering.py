"""Menu engineering: BCG-style classification of dishes by popularity and margin.

Star         = high popularity + high GP%
Plough horse = high popularity + low GP%   -> re-price or reduce cost
Puzzle       = low popularity  + high GP%  -> promote or reposition
Dog          = low popularity  + low GP%   -> consider removing
Uncosted     = priced but no recipe cost   -> cost the recipe first
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from marginiq.config.benchmarks import BenchmarkTable, get_benchmarks
from marginiq.schemas import IngredientPrice, MenuItem, RecipeLine, ResultModel

STAR = "star"
PLOUGH_HORSE = "plough-horse"
PUZZLE = "puzzle"
DOG = "dog"
UNCOSTED = "uncosted"

CATEGORIES = (STAR, PLOUGH_HORSE, PUZZLE, DOG, UNCOSTED)


class ClassifiedItem(ResultModel):
    id: Any
    name: str
    menu_category: Optional[str] = None
    selling_price: float
    cost_per_serve: float
    gp_per_serve: float
    gp_percent: float
    food_cost_percent: float
    popularity_score: float
    popularity_source: str
    category: str


class MenuSummary(ResultModel):
    total_items: int
    counts: Dict[str, int]
    average_gp_percent: Optional[float] = None
    popularity_source: str


class PopularityProvider(Protocol):
    """Supplies a popularity score per menu item and the cut-off for "high"."""

    source: str

    def scores(self, items: Sequence[MenuItem]) -> Dict[Any, float]:
        ...

    def is_high(self, score: float, scores: Mapping[Any, float]) -> bool:
        ...


class SalesVolumePopularity:
    """Popularity from actual units sold; high when at or above the mean volume."""

    source = "sales"

    def __init__(self, volumes: Mapping[Any, float]):
        self._volumes = {str(key): float(value) for key, value in volumes.items()}

    def scores(self, items: Sequence[MenuItem]) -> Dict[Any, float]:
        return {item.id: self._volumes.get(str(item.id), 0.0) for item in items}

    def is_high(self, score: float, scores: Mapping[Any, float]) -> bool:
        if not scores:
            return False
        mean_volume = sum(scores.values()) / len(scores)
        return score >= mean_volume


class UniformPopularityStub:
    """Placeholder used when no sales volumes are available.

    Every item gets the same score and counts as popular, so the matrix only
    separates dishes by margin. Results carry ``popularity_source="stub"``.
    """

    source = "stub"

    def scores(self, items: Sequence[MenuItem]) -> Dict[Any, float]:
        return {item.id: 1.0 for item in items}

    def is_high(self, score: float, scores: Mapping[Any, float]) -> bool:
        return True


def assign_quadrant(high_popularity: bool, high_margin: bool) -> str:
    if high_popularity and high_margin:
        return STAR
    if high_popularity:
        return PLOUGH_HORSE
    if high_margin:
        return PUZZLE
    return DOG


def classify_menu(
    items: Iterable[MenuItem],
    popularity: Optional[PopularityProvider] = None,
    *,
    benchmarks: Optional[BenchmarkTable] = None,
) -> List[ClassifiedItem]:
    """Classify every item with a positive selling price; others are skipped."""

    table = benchmarks or get_benchmarks()
    provider = popularity or UniformPopularityStub()
    priced = [item for item in items if item.selling_price > 0]
    if not priced:
        return []

    scores = provider.scores(priced)
    costed_scores = {item.id: scores.get(item.id, 0.0) for item in priced if item.computed_cost}

    classified: List[ClassifiedItem] = []
    for item in priced:
        price = item.selling_price
        cost = item.computed_cost or 0.0
        gp_per_serve = price - cost
        gp_percent = gp_per_serve / price * 100
        score = scores.get(item.id, 0.0)

        if cost > 0:
            high_margin = gp_percent >= table.menu.high_margin_gp_pct
            category = assign_quadrant(provider.is_high(score, costed_scores), high_margin)
        else:
            category = UNCOSTED

        classified.append(
            ClassifiedItem(
                id=item.id,
                name=item.name,
                menu_category=item.category,
                selling_price=price,
                cost_per_serve=cost,
                gp_per_serve=gp_per_serve,
                gp_percent=gp_percent,
                food_cost_percent=cost / price * 100,
                popularity_score=score,
                popularity_source=provider.source,
                category=category,
            )
        )
    return classified


def summarize_menu(classified: Sequence[ClassifiedItem], *, popularity_source: str = "stub") -> MenuSummary:
    counts = Counter(item.category for item in classified)
    costed = [item for item in classified if item.category != UNCOSTED]
    average_gp = sum(item.gp_percent for item in costed) / len(costed) if costed else None
    source = classified[0].popularity_source if classified else popularity_source
    return MenuSummary(
        total_items=len(classified),
        counts={category: counts.get(category, 0) for category in CATEGORIES},
        average_gp_percent=average_gp,
        popularity_source=source,
    )


def compute_recipe_cost(
    lines: Iterable[RecipeLine],
    prices: Iterable[IngredientPrice],
) -> Optional[float]:
    """Cost per serve from recipe quantities; None when there is no recipe."""

    price_map = {str(price.id): price.current_price for price in prices}
    recipe = list(lines)
    if not recipe:
        return None
    return sum(line.quantity * price_map.get(str(line.ingredient_id), 0.0) for line in recipe)


__all__ = [
    "CATEGORIES",
    "ClassifiedItem",
    "DOG",
    "MenuSummary",
    "PLOUGH_HORSE",
    "PUZZLE",
    "PopularityProvider",
    "STAR",
    "SalesVolumePopularity",
    "UNCOSTED",
    "UniformPopularityStub",
    "assign_quadrant",
    "classify_menu",
    "compute_recipe_cost",
    "summarize_menu",
]
