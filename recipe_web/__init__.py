"""Starlette front end for the recipe assistant."""
