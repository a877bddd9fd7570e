from datetime import datetime
import logging
from typing import Any, Self

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from recipe_assistant.ajolt import in_thread
from recipe_assistant.config import Config
from recipe_assistant.errors import ConfigError, PersistenceError, RecipeNotFound
from recipe_assistant.models import NOT_AVAILABLE, Recipe, StoredRecipe


logger = logging.getLogger(__name__)


TABLE = "recipes"


def supabase_client(config: Config) -> Client:
    if not config.auth_enabled:
        raise ConfigError("SUPABASE_URL and SUPABASE_ANON_KEY must both be set.")
    return create_client(config.supabase_url, config.supabase_anon_key)


def _to_row(owner_id: str, recipe: Recipe, dietary: str, cuisine: str) -> dict[str, Any]:
    return {
        "user_id": owner_id,
        "title": recipe.title,
        "ingredients": list(recipe.ingredients),
        "instructions": list(recipe.instructions),
        "prep_time": recipe.prep_time,
        "cook_time": recipe.cook_time,
        "servings": recipe.servings,
        "dietary_preference": dietary,
        "cuisine_style": cuisine,
    }


def _from_row(row: dict[str, Any]) -> StoredRecipe:
    recipe = Recipe(
        title=row.get("title") or "",
        ingredients=row.get("ingredients") or [],
        instructions=row.get("instructions") or [],
        prep_time=row.get("prep_time") or NOT_AVAILABLE,
        cook_time=row.get("cook_time") or NOT_AVAILABLE,
        servings=row.get("servings") or NOT_AVAILABLE,
    )
    return StoredRecipe(
        id=str(row["id"]),
        owner_id=row["user_id"],
        # Postgres hands back "2024-01-01T10:00:00.123456+00:00"
        created_at=datetime.fromisoformat(row["created_at"]),
        recipe=recipe,
        dietary_preference=row.get("dietary_preference") or "",
        cuisine_style=row.get("cuisine_style") or "",
    )


class SupabaseRecipesRepository:
    """Saved recipes in the hosted `recipes` table.

    The table assigns `id` and `created_at`. Row level security does the real
    scoping; the `user_id` filters keep the queries honest regardless.
    """

    @classmethod
    def from_config(cls, config: Config) -> Self:
        return cls(supabase_client(config))

    def __init__(self, client: Client, *, table: str = TABLE) -> None:
        self.client = client
        self.table = table

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def _execute(self, query: Any, failure: str) -> Any:
        try:
            return await in_thread(query.execute)
        except APIError as e:
            logger.error("%s %s", failure, e.message)
            raise PersistenceError(e.message or failure) from e
        except httpx.HTTPError as e:
            logger.error("%s %r", failure, e)
            raise PersistenceError(failure) from e

    async def list(self, owner_id: str) -> list[StoredRecipe]:
        query = (
            self.client.table(self.table)
            .select("*")
            .eq("user_id", owner_id)
            .order("created_at", desc=True)
        )
        resp = await self._execute(query, "Could not load your saved recipes.")
        return [_from_row(row) for row in resp.data]

    async def get(self, owner_id: str, id: str) -> StoredRecipe:
        query = (
            self.client.table(self.table)
            .select("*")
            .eq("id", id)
            .eq("user_id", owner_id)
        )
        resp = await self._execute(query, "Could not load that recipe.")
        if not resp.data:
            raise RecipeNotFound(f"{id}")
        return _from_row(resp.data[0])

    async def save(
        self, owner_id: str, recipe: Recipe, *, dietary: str = "", cuisine: str = ""
    ) -> StoredRecipe:
        query = self.client.table(self.table).insert(
            _to_row(owner_id, recipe, dietary, cuisine)
        )
        resp = await self._execute(query, "Could not save the recipe.")
        if not resp.data:
            raise PersistenceError("Could not save the recipe.")
        return _from_row(resp.data[0])

    async def delete(self, owner_id: str, id: str) -> None:
        query = (
            self.client.table(self.table)
            .delete()
            .eq("id", id)
            .eq("user_id", owner_id)
        )
        resp = await self._execute(query, "Could not delete the recipe.")
        if not resp.data:
            raise RecipeNotFound(f"{id}")
