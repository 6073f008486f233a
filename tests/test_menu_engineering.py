import pytest

from marginiq.config.benchmarks import DEFAULT_BENCHMARKS
from marginiq.schemas import IngredientPrice, MenuItem, RecipeLine
from marginiq.services.menu_engineering import (
    CATEGORIES,
    DOG,
    PLOUGH_HORSE,
    PUZZLE,
    STAR,
    UNCOSTED,
    SalesVolumePopularity,
    assign_quadrant,
    classify_menu,
    compute_recipe_cost,
    summarize_menu,
)


@pytest.fixture(name="menu")
def menu_fixture():
    return [
        MenuItem(id=1, name="Ribeye", category="Mains", selling_price=10, computed_cost=2),
        MenuItem(id=2, name="Burger", category="Mains", selling_price=10, computed_cost=5),
        MenuItem(id=3, name="Scallops", category="Starters", selling_price=12, computed_cost=3),
        MenuItem(id=4, name="Soup", category="Starters", selling_price=6, computed_cost=4),
        MenuItem(id=5, name="Chips", category="Sides", selling_price=4),
        MenuItem(id=6, name="Tap water", category="Drinks", selling_price=0, computed_cost=0.1),
    ]


def test_quadrants_from_sales_volumes(menu) -> None:
    popularity = SalesVolumePopularity({1: 100, 2: 100, 3: 10, 4: 10, 5: 500})

    classified = {item.id: item.category for item in classify_menu(menu, popularity, benchmarks=DEFAULT_BENCHMARKS)}

    assert classified == {1: STAR, 2: PLOUGH_HORSE, 3: PUZZLE, 4: DOG, 5: UNCOSTED}


def test_every_priced_item_gets_exactly_one_category(menu) -> None:
    classified = classify_menu(menu, benchmarks=DEFAULT_BENCHMARKS)

    assert len(classified) == 5
    assert all(item.category in CATEGORIES for item in classified)
    assert 6 not in {item.id for item in classified}


def test_numeric_fields_are_consistent(menu) -> None:
    for item in classify_menu(menu, benchmarks=DEFAULT_BENCHMARKS):
        assert item.gp_per_serve == pytest.approx(item.selling_price * item.gp_percent / 100)
        assert item.gp_per_serve == pytest.approx(item.selling_price - item.cost_per_serve)
        assert item.gp_percent + item.food_cost_percent == pytest.approx(100)


def test_default_popularity_is_labelled_stub(menu) -> None:
    classified = classify_menu(menu, benchmarks=DEFAULT_BENCHMARKS)

    assert {item.popularity_source for item in classified} == {"stub"}
    assert {item.category for item in classified} <= {STAR, PLOUGH_HORSE, UNCOSTED}


def test_margin_threshold_is_inclusive() -> None:
    item = MenuItem(id=7, name="Pasta", selling_price=20, computed_cost=7)

    assert classify_menu([item], benchmarks=DEFAULT_BENCHMARKS)[0].category == STAR


def test_zero_cost_counts_as_uncosted() -> None:
    item = MenuItem(id=8, name="Bread", selling_price=3, computed_cost=0)

    assert classify_menu([item], benchmarks=DEFAULT_BENCHMARKS)[0].category == UNCOSTED


@pytest.mark.parametrize(
    "popular,profitable,expected",
    [(True, True, STAR), (True, False, PLOUGH_HORSE), (False, True, PUZZLE), (False, False, DOG)],
)
def test_assign_quadrant(popular, profitable, expected) -> None:
    assert assign_quadrant(popular, profitable) == expected


def test_summary_counts_every_category(menu) -> None:
    classified = classify_menu(menu, SalesVolumePopularity({1: 100, 2: 100, 3: 10, 4: 10}), benchmarks=DEFAULT_BENCHMARKS)

    summary = summarize_menu(classified)

    assert summary.total_items == 5
    assert summary.counts == {STAR: 1, PLOUGH_HORSE: 1, PUZZLE: 1, DOG: 1, UNCOSTED: 1}
    assert summary.popularity_source == "sales"
    assert summary.average_gp_percent == pytest.approx((80 + 50 + 75 + 100 / 3) / 4)


def test_recipe_cost_from_ingredient_prices() -> None:
    lines = [RecipeLine(ingredient_id=1, quantity=0.2), RecipeLine(ingredient_id="2", quantity=2)]
    prices = [IngredientPrice(id="1", current_price=10), IngredientPrice(id=2, current_price=0.5)]

    assert compute_recipe_cost(lines, prices) == pytest.approx(3.0)
    assert compute_recipe_cost([], prices) is None
