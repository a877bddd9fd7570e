"""ASGI entrypoint.

    uvicorn main:app --reload
"""

from recipe_web.app import create_app


app = create_app()
