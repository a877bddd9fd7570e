"""Describes the recipe assistant domain. Centres around the `AssistantController`.

Why is this hard?

- Creating a recipe is handed to a large language model behind an api.
- The model answers in free text, we want a structured `Recipe`.
- Persistence and auth live in a hosted backend.
- No invariants beyond the transcript order and "newest request wins".

Should be able to fake the api and the backend.
"""
