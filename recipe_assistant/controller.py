import asyncio
import logging
from typing import Protocol

from recipe_assistant.chat import ChatSession
from recipe_assistant.completion import Mode
from recipe_assistant.errors import AssistantError, MissingIngredientsError
from recipe_assistant.models import ChatMessage, Recipe
from recipe_assistant.parser import RecipeParser
from recipe_assistant.prompts import CookingQuestionPrompt, CreateRecipePrompt


logger = logging.getLogger(__name__)


CHAT_ERROR_REPLY = "Sorry, I encountered an error. Please try again."


class Completer(Protocol):
    async def complete(self, prompt: str, mode: Mode) -> str:
        ...


class AssistantState:
    """Everything the views render. Mutated only through the methods below."""

    def __init__(self) -> None:
        self.ingredients = ""
        self.dietary = ""
        self.cuisine = ""
        self.loading = False
        self.current_recipe: Recipe | None = None
        self.chat = ChatSession()

    def set_form(self, *, ingredients: str, dietary: str, cuisine: str) -> None:
        self.ingredients = ingredients
        self.dietary = dietary
        self.cuisine = cuisine

    def publish(self, recipe: Recipe) -> None:
        self.current_recipe = recipe

    def reset(self) -> None:
        self.set_form(ingredients="", dietary="", cuisine="")
        self.loading = False
        self.current_recipe = None
        self.chat = ChatSession()


class AssistantController:
    def __init__(
        self,
        completion: Completer,
        *,
        parser: RecipeParser | None = None,
        state: AssistantState | None = None,
    ) -> None:
        self.completion = completion
        self.parser = RecipeParser() if parser is None else parser
        self.state = AssistantState() if state is None else state
        self._generation = 0
        self._chat_lock = asyncio.Lock()

    @property
    def current_recipe(self) -> Recipe | None:
        return self.state.current_recipe

    def messages(self) -> tuple[ChatMessage, ...]:
        return self.state.chat.messages()

    def _is_latest(self, generation: int) -> bool:
        return generation == self._generation

    async def generate_recipe(
        self, ingredients: str, dietary: str = "", cuisine: str = ""
    ) -> Recipe | None:
        """Ask for a recipe and publish it as the current one.

        Returns `None` when a newer request was issued while this one was
        outstanding; its reply is dropped. Completion errors propagate and
        leave the current recipe as it was.
        """
        if not ingredients.strip():
            raise MissingIngredientsError("Please list some ingredients.")

        self._generation += 1
        generation = self._generation
        self.state.set_form(ingredients=ingredients, dietary=dietary, cuisine=cuisine)
        self.state.loading = True

        prompt = CreateRecipePrompt(ingredients, dietary=dietary, cuisine=cuisine)
        try:
            raw = await self.completion.complete(str(prompt), Mode.recipe)
        except AssistantError:
            if not self._is_latest(generation):
                logger.info("Dropping failed recipe request %d, superseded", generation)
                return None
            self.state.loading = False
            raise

        if not self._is_latest(generation):
            logger.info("Dropping recipe reply %d, superseded", generation)
            return None

        recipe = self.parser.parse(raw, ingredients=ingredients)
        self.state.publish(recipe)
        self.state.loading = False
        return recipe

    async def send_chat_message(self, text: str) -> ChatMessage | None:
        """Record the question, ask it and record the answer.

        Failures become an assistant turn rather than an exception. Returns
        `None` when the transcript was reset while the question was
        outstanding; the answer is dropped.
        """
        if not text.strip():
            return None

        chat = self.state.chat
        chat.append_user(text)
        recipe = self.state.current_recipe
        prompt = CookingQuestionPrompt(text, recipe.title if recipe else None)

        async with self._chat_lock:
            try:
                reply = await self.completion.complete(str(prompt), Mode.chat)
            except AssistantError:
                if chat is not self.state.chat:
                    logger.info("Dropping failed chat reply, transcript was reset")
                    return None
                logger.exception("Chat completion failed")
                return chat.append_assistant(CHAT_ERROR_REPLY)

        if chat is not self.state.chat:
            logger.info("Dropping chat reply, transcript was reset")
            return None
        return chat.append_assistant(reply)

    def load_recipe(self, recipe: Recipe) -> None:
        self._generation += 1
        self.state.loading = False
        self.state.publish(recipe)

    def reset(self) -> None:
        self._generation += 1
        self.state.reset()
