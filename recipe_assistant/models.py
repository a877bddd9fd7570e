from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import markdown2  # pyright: ignore[reportMissingTypeStubs]


NOT_AVAILABLE = "N/A"


@dataclass
class Recipe:
    """A generated or stored recipe.

    The JSON shape the model is asked for uses camelCase names for the
    timing fields, see `to_dict`.
    """

    title: str
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    prep_time: str = NOT_AVAILABLE
    cook_time: str = NOT_AVAILABLE
    servings: str = NOT_AVAILABLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
            "prepTime": self.prep_time,
            "cookTime": self.cook_time,
            "servings": self.servings,
        }

    def timings(self) -> list[tuple[str, str]]:
        """Label/value pairs worth displaying, "N/A" and blanks dropped."""
        pairs = [
            ("Prep", self.prep_time),
            ("Cook", self.cook_time),
            ("Serves", self.servings),
        ]
        return [
            (label, value)
            for label, value in pairs
            if value and value.strip() and value.strip() != NOT_AVAILABLE
        ]


class Role(Enum):
    user = "user"
    assistant = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    @property
    def html(self) -> str:
        return markdown2.markdown(  # pyright: ignore[reportUnknownVariableType, reportUnknownMemberType]
            self.content, safe_mode="escape"
        )


@dataclass(frozen=True)
class StoredRecipe:
    id: str
    owner_id: str
    created_at: datetime
    recipe: Recipe
    dietary_preference: str = ""
    cuisine_style: str = ""

    @property
    def title(self) -> str:
        return self.recipe.title

    def __repr__(self) -> str:
        return f"<StoredRecipe(id={self.id}, title={self.title})>"


@dataclass(frozen=True)
class UserSession:
    user_id: str
    email: str
    access_token: str = ""
