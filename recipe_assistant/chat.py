from recipe_assistant.models import ChatMessage, Role


class ChatSession:
    """Append-only transcript, kept in the order messages were added."""

    def __init__(self, messages: list[ChatMessage] | None = None) -> None:
        self._messages: list[ChatMessage] = [] if messages is None else list(messages)

    def append(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        return message

    def append_user(self, text: str) -> ChatMessage:
        return self.append(ChatMessage(role=Role.user, content=text))

    def append_assistant(self, text: str) -> ChatMessage:
        return self.append(ChatMessage(role=Role.assistant, content=text))

    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)
