from datetime import datetime, timezone
import json
import logging
from typing import Callable, Iterable, Protocol
from uuid import uuid4

from databases import Database
from databases.interfaces import Record

from recipe_assistant.errors import PersistenceError, RecipeNotFound
from recipe_assistant.models import NOT_AVAILABLE, Recipe, StoredRecipe


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecipesRepository(Protocol):
    """What the web layer needs from a saved-recipes backend.

    Every operation is scoped to the owner; a recipe is never visible to, or
    deletable by, anyone else. Saved recipes cannot be edited.
    """

    async def connect(self) -> None:
        ...

    async def disconnect(self) -> None:
        ...

    async def list(self, owner_id: str) -> list[StoredRecipe]:
        """Owner's recipes, newest first."""
        ...

    async def get(self, owner_id: str, id: str) -> StoredRecipe:
        """A single recipe or raise :class:`RecipeNotFound`."""
        ...

    async def save(
        self, owner_id: str, recipe: Recipe, *, dietary: str = "", cuisine: str = ""
    ) -> StoredRecipe:
        ...

    async def delete(self, owner_id: str, id: str) -> None:
        """Remove the recipe or raise :class:`RecipeNotFound`."""
        ...


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS saved_recipes (
    id VARCHAR(64) PRIMARY KEY,
    owner_id VARCHAR(64) NOT NULL,
    title VARCHAR(256) NOT NULL,
    ingredients TEXT NOT NULL,
    instructions TEXT NOT NULL,
    prep_time VARCHAR(64),
    cook_time VARCHAR(64),
    servings VARCHAR(64),
    dietary_preference VARCHAR(64),
    cuisine_style VARCHAR(64),
    created_at VARCHAR(40) NOT NULL
)
"""


CREATE_RECIPE = """
INSERT INTO saved_recipes(
    id, owner_id, title, ingredients, instructions, prep_time, cook_time,
    servings, dietary_preference, cuisine_style, created_at
) VALUES (
    :id, :owner_id, :title, :ingredients, :instructions, :prep_time, :cook_time,
    :servings, :dietary_preference, :cuisine_style, :created_at
)
"""


GET_RECIPE = "SELECT * FROM saved_recipes WHERE id = :id AND owner_id = :owner_id"


LIST_RECIPES = """
SELECT * FROM saved_recipes WHERE owner_id = :owner_id ORDER BY created_at DESC
"""


DELETE_RECIPE = "DELETE FROM saved_recipes WHERE id = :id AND owner_id = :owner_id"


def _from_record(record: Record) -> StoredRecipe:
    recipe = Recipe(
        title=record["title"],
        ingredients=json.loads(record["ingredients"]),
        instructions=json.loads(record["instructions"]),
        prep_time=record["prep_time"] or NOT_AVAILABLE,
        cook_time=record["cook_time"] or NOT_AVAILABLE,
        servings=record["servings"] or NOT_AVAILABLE,
    )
    return StoredRecipe(
        id=record["id"],
        owner_id=record["owner_id"],
        created_at=datetime.fromisoformat(record["created_at"]),
        recipe=recipe,
        dietary_preference=record["dietary_preference"] or "",
        cuisine_style=record["cuisine_style"] or "",
    )


class SqlRecipesRepository:
    """Saved recipes in a SQL table, sqlite unless told otherwise."""

    def __init__(self, db: Database, *, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.clock = clock

    @classmethod
    def from_url(cls, url: str) -> "SqlRecipesRepository":
        return cls(Database(url))

    async def connect(self) -> None:
        await self.db.connect()
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            query=CREATE_RECIPES_TABLE
        )

    async def disconnect(self) -> None:
        await self.db.disconnect()

    async def list(self, owner_id: str) -> list[StoredRecipe]:
        try:
            result: Iterable[Record] = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                LIST_RECIPES, values={"owner_id": owner_id}
            )
        except Exception as e:
            logger.error("Could not list recipes for %s: %r", owner_id, e)
            raise PersistenceError("Could not load your saved recipes.") from e
        return [_from_record(r) for r in result]

    async def get(self, owner_id: str, id: str) -> StoredRecipe:
        try:
            result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
                GET_RECIPE, values={"id": id, "owner_id": owner_id}
            )
        except Exception as e:
            logger.error("Could not fetch recipe %s: %r", id, e)
            raise PersistenceError("Could not load that recipe.") from e

        if result is None:
            raise RecipeNotFound(f"{id}")
        return _from_record(result)

    async def save(
        self, owner_id: str, recipe: Recipe, *, dietary: str = "", cuisine: str = ""
    ) -> StoredRecipe:
        stored = StoredRecipe(
            id=uuid4().hex,
            owner_id=owner_id,
            created_at=self.clock(),
            recipe=recipe,
            dietary_preference=dietary,
            cuisine_style=cuisine,
        )
        values = {
            "id": stored.id,
            "owner_id": owner_id,
            "title": recipe.title,
            "ingredients": json.dumps(recipe.ingredients),
            "instructions": json.dumps(recipe.instructions),
            "prep_time": recipe.prep_time,
            "cook_time": recipe.cook_time,
            "servings": recipe.servings,
            "dietary_preference": dietary,
            "cuisine_style": cuisine,
            "created_at": stored.created_at.isoformat(timespec="microseconds"),
        }
        try:
            async with self.db.transaction():
                await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                    CREATE_RECIPE, values=values
                )
        except Exception as e:
            logger.error("Could not save recipe for %s: %r", owner_id, e)
            raise PersistenceError("Could not save the recipe.") from e
        return stored

    async def delete(self, owner_id: str, id: str) -> None:
        async with self.db.transaction():
            await self.get(owner_id, id)
            try:
                await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                    DELETE_RECIPE, values={"id": id, "owner_id": owner_id}
                )
            except Exception as e:
                logger.error("Could not delete recipe %s: %r", id, e)
                raise PersistenceError("Could not delete the recipe.") from e
