from .http import HttpMessageStore
from .messages import (
    Fragment,
    InMemoryMessageStore,
    Message,
    MessageRole,
    MessageStore,
    MessageType,
    NewMessage,
)

__all__ = [
    "Fragment",
    "HttpMessageStore",
    "InMemoryMessageStore",
    "Message",
    "MessageRole",
    "MessageStore",
    "MessageType",
    "NewMessage",
]
