class AssistantError(Exception):
    """Base class for everything the assistant reports to its callers."""


class ConfigError(AssistantError):
    pass


class AuthError(ConfigError):
    """No usable completion credential is configured."""


class TransportError(AssistantError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(AssistantError):
    """The completion endpoint answered with a structured error body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ParseError(AssistantError):
    pass


class MissingIngredientsError(AssistantError, ValueError):
    pass


class PersistenceError(AssistantError):
    pass


class RecipeNotFound(PersistenceError):
    pass


class AccountError(AssistantError):
    pass
