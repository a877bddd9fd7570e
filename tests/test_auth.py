from types import SimpleNamespace
from typing import Any

import pytest
from supabase import AuthError as SupabaseAuthError

from recipe_assistant.auth import AuthService
from recipe_assistant.errors import AccountError
from recipe_assistant.models import UserSession


class FakeAuth:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, Any]] = []

    def _record(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        if self.error is not None:
            raise self.error

    def sign_up(self, credentials: dict[str, str]) -> SimpleNamespace:
        self._record("sign_up", credentials)
        return SimpleNamespace(user=None, session=None)

    def sign_in_with_password(self, credentials: dict[str, str]) -> SimpleNamespace:
        self._record("sign_in", credentials)
        return SimpleNamespace(
            user=SimpleNamespace(id="user-1", email=credentials["email"]),
            session=SimpleNamespace(access_token="jwt"),
        )

    def sign_out(self) -> None:
        self._record("sign_out")


def service(auth: FakeAuth) -> AuthService:
    return AuthService(SimpleNamespace(auth=auth))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_sign_in_returns_session() -> None:
    auth = FakeAuth()
    got = await service(auth).sign_in(" cook@example.com ", "secret1")

    assert got == UserSession(user_id="user-1", email="cook@example.com", access_token="jwt")
    assert auth.calls == [("sign_in", {"email": "cook@example.com", "password": "secret1"})]


@pytest.mark.asyncio
async def test_sign_up_sends_credentials() -> None:
    auth = FakeAuth()
    await service(auth).sign_up("cook@example.com", "secret1")
    assert auth.calls == [("sign_up", {"email": "cook@example.com", "password": "secret1"})]


@pytest.mark.parametrize(
    "email,password",
    (("cook@example.com", "12345"), ("", "secret1"), ("   ", "secret1")),
)
@pytest.mark.asyncio
async def test_bad_credentials_rejected_locally(email: str, password: str) -> None:
    auth = FakeAuth()
    with pytest.raises(AccountError):
        await service(auth).sign_up(email, password)
    with pytest.raises(AccountError):
        await service(auth).sign_in(email, password)
    assert auth.calls == []


@pytest.mark.asyncio
async def test_supabase_error_becomes_account_error() -> None:
    auth = FakeAuth(SupabaseAuthError("Invalid login credentials", None))
    with pytest.raises(AccountError) as exc_info:
        await service(auth).sign_in("cook@example.com", "wrong-password")
    assert str(exc_info.value) == "Invalid login credentials"


@pytest.mark.asyncio
async def test_sign_out() -> None:
    auth = FakeAuth()
    await service(auth).sign_out()
    assert auth.calls == [("sign_out", None)]
