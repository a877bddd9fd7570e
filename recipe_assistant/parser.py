"""Turns a completion reply into a `Recipe`.

The model is asked for a JSON object but does not always oblige, so parsing
never fails: anything that is not the expected shape gets a fallback recipe.
"""

from dataclasses import dataclass
import logging

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator

from recipe_assistant.config import FallbackStrategy
from recipe_assistant.errors import ParseError
from recipe_assistant.models import NOT_AVAILABLE, Recipe


logger = logging.getLogger(__name__)


FALLBACK_TITLE = "Generated Recipe"
FALLBACK_INSTRUCTION = "Unable to parse recipe. Please try again."
LINE_SPLIT_TITLE = "AI Generated Recipe"


class RecipePayload(BaseModel):
    """The JSON object the recipe system prompt asks for."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr
    ingredients: list[StrictStr]
    instructions: list[StrictStr]
    prepTime: StrictStr = NOT_AVAILABLE
    cookTime: StrictStr = NOT_AVAILABLE
    servings: StrictStr = NOT_AVAILABLE

    @field_validator("prepTime", "cookTime", "servings", mode="before")
    @classmethod
    def timing_as_text(cls, value: object) -> object:
        if value is None:
            return NOT_AVAILABLE
        # "servings": 4 is common enough to accept.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_recipe(self) -> Recipe:
        return Recipe(
            title=self.title,
            ingredients=list(self.ingredients),
            instructions=list(self.instructions),
            prep_time=self.prepTime,
            cook_time=self.cookTime,
            servings=self.servings,
        )


@dataclass(frozen=True)
class ParseOutcome:
    recipe: Recipe | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.recipe is not None


def placeholder_recipe(ingredients: str) -> Recipe:
    return Recipe(
        title=FALLBACK_TITLE,
        ingredients=[f"Using: {ingredients}"],
        instructions=[FALLBACK_INSTRUCTION],
    )


def line_split_recipe(raw: str) -> Recipe:
    """Legacy fallback: first line is the title, the rest split in half."""
    lines = [line for line in raw.split("\n") if line.strip()]
    half = len(lines) // 2
    return Recipe(
        title=lines[0] if lines else LINE_SPLIT_TITLE,
        ingredients=lines[1:half],
        instructions=lines[half:],
        prep_time="15 minutes",
        cook_time="25 minutes",
        servings="4",
    )


class RecipeParser:
    def __init__(
        self, fallback_strategy: FallbackStrategy = FallbackStrategy.placeholder
    ) -> None:
        self.fallback_strategy = fallback_strategy

    def try_parse(self, raw: str) -> ParseOutcome:
        try:
            payload = RecipePayload.model_validate_json(raw)
        except ValidationError as e:
            return ParseOutcome(error=ParseError(f"Reply is not a recipe object: {e}"))
        return ParseOutcome(recipe=payload.to_recipe())

    def fallback(self, raw: str, *, ingredients: str = "") -> Recipe:
        match self.fallback_strategy:
            case FallbackStrategy.line_split:
                return line_split_recipe(raw)
            case _:
                return placeholder_recipe(ingredients)

    def parse(self, raw: str, *, ingredients: str = "") -> Recipe:
        outcome = self.try_parse(raw)
        if outcome.recipe is not None:
            return outcome.recipe
        logger.warning(
            "Falling back to %s recipe. %s", self.fallback_strategy.value, outcome.error
        )
        return self.fallback(raw, ingredients=ingredients)
