import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape
from starlette.applications import Starlette
from starlette.datastructures import FormData
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse
from starlette.routing import Route

from recipe_assistant.auth import AuthService
from recipe_assistant.completion import CompletionClient
from recipe_assistant.config import Config, Env, RecipesBackend, configure_logging
from recipe_assistant.controller import AssistantController
from recipe_assistant.errors import (
    AccountError,
    ConfigError,
    MissingIngredientsError,
    PersistenceError,
    RecipeNotFound,
    TransportError,
    UpstreamError,
)
from recipe_assistant.models import StoredRecipe
from recipe_assistant.parser import RecipeParser
from recipe_assistant.repository import RecipesRepository, SqlRecipesRepository
from recipe_assistant.supabase_store import SupabaseRecipesRepository


logger = logging.getLogger(__name__)


DIETARY_OPTIONS = [
    ("", "No specific preference"),
    ("vegetarian", "Vegetarian"),
    ("vegan", "Vegan"),
    ("gluten-free", "Gluten-Free"),
    ("keto", "Keto"),
    ("low-carb", "Low-Carb"),
    ("dairy-free", "Dairy-Free"),
]

CUISINE_OPTIONS = [
    ("", "Any cuisine"),
    ("italian", "Italian"),
    ("asian", "Asian"),
    ("mexican", "Mexican"),
    ("mediterranean", "Mediterranean"),
    ("american", "American"),
    ("indian", "Indian"),
    ("french", "French"),
    ("thai", "Thai"),
]


class Notice:
    def __init__(self, text: str, kind: str = "error") -> None:
        self.text = text
        self.kind = kind


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> HTMLResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def home() -> RedirectResponse:
    return RedirectResponse("/", status_code=303)


def notify(request: Request, text: str, kind: str = "error") -> None:
    request.app.state.notices.append(Notice(text, kind))


def field(form: FormData, name: str) -> str:
    value = form.get(name, "")
    return value if isinstance(value, str) else ""


def render(request: Request, name: str, **context: Any) -> str:
    templates: Environment = request.app.state.templates
    return templates.get_template(name).render(**context)


@aHTMLResponse
async def homepage(request: Request) -> str:
    state = request.app.state
    notices: list[Notice] = state.notices
    state.notices = []

    if not state.completion.configured:
        return render(request, "configure.html", notices=notices)

    if state.auth is not None and state.user is None:
        return render(
            request,
            "auth.html",
            notices=notices,
            sign_up=request.query_params.get("mode") == "sign-up",
        )

    controller: AssistantController = state.controller
    saved: list[StoredRecipe] = []
    can_save = state.repository is not None and state.user is not None
    if can_save:
        try:
            saved = await state.repository.list(state.user.user_id)
        except PersistenceError as e:
            notices.append(Notice(str(e)))

    return render(
        request,
        "index.html",
        notices=notices,
        form=controller.state,
        recipe=controller.current_recipe,
        messages=controller.messages(),
        saved=saved,
        can_save=can_save,
        user=state.user,
        dietary_options=DIETARY_OPTIONS,
        cuisine_options=CUISINE_OPTIONS,
    )


async def api_key(request: Request) -> RedirectResponse:
    async with request.form() as form:
        key = field(form, "api_key")
    try:
        request.app.state.completion.set_api_key(key)
    except ConfigError as e:
        notify(request, str(e))
    return home()


async def recipe(request: Request) -> RedirectResponse:
    async with request.form() as form:
        ingredients = field(form, "ingredients")
        dietary = field(form, "dietary")
        cuisine = field(form, "cuisine")

    controller: AssistantController = request.app.state.controller
    try:
        await controller.generate_recipe(ingredients, dietary=dietary, cuisine=cuisine)
    except MissingIngredientsError as e:
        notify(request, str(e))
    except ConfigError as e:
        notify(request, str(e))
    except (TransportError, UpstreamError) as e:
        logger.error("Error generating recipe: %s", e)
        notify(request, f"Error generating recipe: {e}")
    return home()


async def chat(request: Request) -> RedirectResponse:
    async with request.form() as form:
        message = field(form, "message")
    controller: AssistantController = request.app.state.controller
    await controller.send_chat_message(message)
    return home()


async def reset(request: Request) -> RedirectResponse:
    request.app.state.controller.reset()
    return home()


def _storage(request: Request) -> RecipesRepository | None:
    state = request.app.state
    if state.repository is None or state.user is None:
        notify(request, "Please sign in to manage saved recipes.")
        return None
    return state.repository


async def save_recipe(request: Request) -> RedirectResponse:
    repository = _storage(request)
    if repository is None:
        return home()

    controller: AssistantController = request.app.state.controller
    current = controller.current_recipe
    if current is None:
        notify(request, "Generate a recipe before saving it.")
        return home()

    try:
        stored = await repository.save(
            request.app.state.user.user_id,
            current,
            dietary=controller.state.dietary,
            cuisine=controller.state.cuisine,
        )
    except PersistenceError as e:
        notify(request, f"Failed to save recipe: {e}")
    else:
        notify(request, f"Recipe '{stored.title}' saved.", "success")
    return home()


async def load_recipe(request: Request) -> RedirectResponse:
    repository = _storage(request)
    if repository is None:
        return home()

    id = request.path_params["id"]
    try:
        stored = await repository.get(request.app.state.user.user_id, id)
    except RecipeNotFound:
        notify(request, "Recipe not found.")
    except PersistenceError as e:
        notify(request, f"Failed to load recipe: {e}")
    else:
        request.app.state.controller.load_recipe(stored.recipe)
    return home()


async def delete_recipe(request: Request) -> RedirectResponse:
    repository = _storage(request)
    if repository is None:
        return home()

    async with request.form() as form:
        confirmed = field(form, "confirm") == "yes"
    if not confirmed:
        notify(request, "Please confirm that you want to delete this recipe.")
        return home()

    id = request.path_params["id"]
    try:
        await repository.delete(request.app.state.user.user_id, id)
    except RecipeNotFound:
        notify(request, "Recipe not found.")
    except PersistenceError as e:
        notify(request, f"Failed to delete recipe: {e}")
    else:
        notify(request, "Recipe deleted.", "success")
    return home()


async def sign_up(request: Request) -> RedirectResponse:
    auth: AuthService | None = request.app.state.auth
    async with request.form() as form:
        email = field(form, "email")
        password = field(form, "password")
    if auth is None:
        return home()
    try:
        await auth.sign_up(email, password)
    except AccountError as e:
        notify(request, str(e))
        return RedirectResponse("/?mode=sign-up", status_code=303)
    notify(request, "Check your email for the confirmation link!", "success")
    return home()


async def sign_in(request: Request) -> RedirectResponse:
    auth: AuthService | None = request.app.state.auth
    async with request.form() as form:
        email = field(form, "email")
        password = field(form, "password")
    if auth is None:
        return home()
    try:
        request.app.state.user = await auth.sign_in(email, password)
    except AccountError as e:
        notify(request, str(e))
    return home()


async def sign_out(request: Request) -> RedirectResponse:
    auth: AuthService | None = request.app.state.auth
    if auth is not None:
        try:
            await auth.sign_out()
        except AccountError as e:
            notify(request, str(e))
    request.app.state.user = None
    request.app.state.controller.reset()
    return home()


def _default_repository(config: Config, auth: AuthService) -> RecipesRepository:
    match config.recipes_backend:
        case RecipesBackend.sql:
            return SqlRecipesRepository.from_url(config.db_url)
        case _:
            # Share the auth client so queries run as the signed-in user.
            return SupabaseRecipesRepository(auth.client)


def create_app(
    config: Config | None = None,
    *,
    completion: CompletionClient | None = None,
    repository: RecipesRepository | None = None,
    auth: AuthService | None = None,
) -> Starlette:
    """Build the web app.

    Auth and saved recipes are switched on when Supabase is configured, or
    when an `auth` service is passed in explicitly.
    """
    config = Config() if config is None else config
    configure_logging(config.log_level)

    completion = CompletionClient.from_config(config) if completion is None else completion
    if auth is None and config.auth_enabled:
        auth = AuthService.from_config(config)
    if repository is None and auth is not None:
        repository = _default_repository(config, auth)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        if repository is not None:
            await repository.connect()
        yield
        if repository is not None:
            await repository.disconnect()
        await completion.close()

    app = Starlette(
        debug=config.env == Env.local,
        routes=[
            Route("/", homepage),
            Route("/api-key", api_key, methods=["POST"]),
            Route("/recipe", recipe, methods=["POST"]),
            Route("/chat", chat, methods=["POST"]),
            Route("/reset", reset, methods=["POST"]),
            Route("/recipes", save_recipe, methods=["POST"]),
            Route("/recipes/{id}/load", load_recipe, methods=["POST"]),
            Route("/recipes/{id}/delete", delete_recipe, methods=["POST"]),
            Route("/auth/sign-up", sign_up, methods=["POST"]),
            Route("/auth/sign-in", sign_in, methods=["POST"]),
            Route("/auth/sign-out", sign_out, methods=["POST"]),
        ],
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.templates = Environment(
        loader=FileSystemLoader(config.html_dir),
        autoescape=select_autoescape(),
    )
    app.state.completion = completion
    app.state.controller = AssistantController(
        completion, parser=RecipeParser(config.fallback_strategy)
    )
    app.state.auth = auth
    app.state.repository = repository
    app.state.user = None
    app.state.notices = []
    return app
