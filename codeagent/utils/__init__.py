from .retry import retry_with_backoff
from .serializer import deserialize, safe_serialize, serialize

__all__ = [
    "retry_with_backoff",
    "serialize",
    "deserialize",
    "safe_serialize",
]
