from app.client.blog_client import (
    ApiError,
    BlogClient,
    InMemoryTokenStore,
    TokenStore,
    format_error_message,
    normalize_categories,
)

__all__ = [
    "ApiError",
    "BlogClient",
    "InMemoryTokenStore",
    "TokenStore",
    "format_error_message",
    "normalize_categories",
]
