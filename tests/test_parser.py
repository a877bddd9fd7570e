import json

import pytest

from conftest import CHICKEN_RICE
from recipe_assistant.config import FallbackStrategy
from recipe_assistant.errors import ParseError
from recipe_assistant.models import Recipe
from recipe_assistant.parser import RecipeParser, placeholder_recipe


def test_parse_valid_reply_verbatim() -> None:
    got = RecipeParser().parse(CHICKEN_RICE, ingredients="chicken, rice")
    assert got == Recipe(
        title="Chicken Rice",
        ingredients=["chicken", "rice"],
        instructions=["cook"],
        prep_time="5 min",
        cook_time="10 min",
        servings="2",
    )


def test_parse_prose_gives_placeholder() -> None:
    got = RecipeParser().parse(
        "Sorry, I can't help with that.", ingredients="chicken, rice"
    )
    assert got.to_dict() == {
        "title": "Generated Recipe",
        "ingredients": ["Using: chicken, rice"],
        "instructions": ["Unable to parse recipe. Please try again."],
        "prepTime": "N/A",
        "cookTime": "N/A",
        "servings": "N/A",
    }


@pytest.mark.parametrize(
    "raw",
    (
        "",
        "   ",
        "{",
        '{"title": "Soup", "ingredients": ["water"',
        '{"name": "Soup", "steps": ["boil"]}',
        '{"title": 3, "ingredients": [], "instructions": []}',
        '{"title": "Soup", "ingredients": "water", "instructions": []}',
        '{"title": "Soup", "ingredients": [1, 2], "instructions": []}',
        "[]",
        "null",
        '"just a string"',
        "Here is your recipe:\n```json\n{}\n```",
    ),
)
def test_parse_is_total(raw: str) -> None:
    got = RecipeParser().parse(raw, ingredients="water")
    assert got == placeholder_recipe("water")


@pytest.mark.parametrize("strategy", list(FallbackStrategy))
def test_parse_round_trip(strategy: FallbackStrategy) -> None:
    recipe = Recipe(
        title="Tomato Soup",
        ingredients=["tomatoes", "stock", "basil"],
        instructions=["Simmer.", "Blend."],
        prep_time="10 minutes",
        cook_time="30 minutes",
        servings="4",
    )
    assert RecipeParser(strategy).parse(json.dumps(recipe.to_dict())) == recipe


def test_parse_accepts_empty_lists() -> None:
    raw = '{"title": "Air", "ingredients": [], "instructions": []}'
    got = RecipeParser().parse(raw)
    assert got.ingredients == []
    assert got.instructions == []
    assert (got.prep_time, got.cook_time, got.servings) == ("N/A", "N/A", "N/A")


def test_parse_numeric_servings_and_null_times() -> None:
    raw = (
        '{"title": "Pasta", "ingredients": ["pasta"], "instructions": ["boil"], '
        '"prepTime": null, "cookTime": "12 minutes", "servings": 4}'
    )
    got = RecipeParser().parse(raw)
    assert got.servings == "4"
    assert got.prep_time == "N/A"
    assert got.cook_time == "12 minutes"


def test_try_parse_tags_failure() -> None:
    outcome = RecipeParser().try_parse("not json")
    assert not outcome.ok
    assert outcome.recipe is None
    assert isinstance(outcome.error, ParseError)

    outcome = RecipeParser().try_parse(CHICKEN_RICE)
    assert outcome.ok
    assert outcome.error is None


def test_line_split_fallback() -> None:
    raw = "Pancakes\n\nflour\neggs\nmix\nfry"
    got = RecipeParser(FallbackStrategy.line_split).parse(raw, ingredients="flour")
    assert got == Recipe(
        title="Pancakes",
        ingredients=["flour"],
        instructions=["eggs", "mix", "fry"],
        prep_time="15 minutes",
        cook_time="25 minutes",
        servings="4",
    )


def test_line_split_fallback_empty_reply() -> None:
    got = RecipeParser(FallbackStrategy.line_split).parse("")
    assert got.title == "AI Generated Recipe"
    assert got.ingredients == []
    assert got.instructions == []


def test_timings_skip_missing_values() -> None:
    recipe = Recipe(title="Toast", prep_time="2 minutes", cook_time="N/A", servings="")
    assert recipe.timings() == [("Prep", "2 minutes")]
    assert placeholder_recipe("bread").timings() == []
