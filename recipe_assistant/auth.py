"""Accounts, backed by Supabase Auth.

Sign-up sends a confirmation link by email; the user signs in afterwards.
"""

import logging
from typing import Self

from supabase import AuthError as SupabaseAuthError
from supabase import Client

from recipe_assistant.ajolt import in_thread
from recipe_assistant.config import Config
from recipe_assistant.errors import AccountError
from recipe_assistant.models import UserSession
from recipe_assistant.supabase_store import supabase_client


logger = logging.getLogger(__name__)


MIN_PASSWORD_LENGTH = 6


def _check_credentials(email: str, password: str) -> None:
    if not email.strip():
        raise AccountError("Please enter your email.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AccountError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )


class AuthService:
    @classmethod
    def from_config(cls, config: Config) -> Self:
        return cls(supabase_client(config))

    def __init__(self, client: Client) -> None:
        self.client = client

    async def sign_up(self, email: str, password: str) -> None:
        _check_credentials(email, password)
        try:
            await in_thread(
                self.client.auth.sign_up, {"email": email.strip(), "password": password}
            )
        except SupabaseAuthError as e:
            logger.error("Sign-up failed for %s: %s", email, e.message)
            raise AccountError(e.message) from e

    async def sign_in(self, email: str, password: str) -> UserSession:
        _check_credentials(email, password)
        try:
            resp = await in_thread(
                self.client.auth.sign_in_with_password,
                {"email": email.strip(), "password": password},
            )
        except SupabaseAuthError as e:
            logger.error("Sign-in failed for %s: %s", email, e.message)
            raise AccountError(e.message) from e

        if resp.user is None:
            raise AccountError("Sign-in did not return a user.")
        token = resp.session.access_token if resp.session else ""
        return UserSession(
            user_id=resp.user.id, email=resp.user.email or email, access_token=token
        )

    async def sign_out(self) -> None:
        try:
            await in_thread(self.client.auth.sign_out)
        except SupabaseAuthError as e:
            logger.error("Sign-out failed: %s", e.message)
            raise AccountError(e.message) from e
