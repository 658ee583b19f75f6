from typing import Callable, List, Optional

import requests

from app.core.config import settings
from app.core.logging import get_logger
from app.models.blog import normalize_categories as normalize_category_list

log = get_logger("blog-client")

API_PREFIX = "/api"


class ApiError(Exception):
    def __init__(self, message: str, status_code: int, error: str = None, details=None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"message": self.message, "status_code": self.status_code}
        if self.error:
            body["error"] = self.error
        if self.details:
            body["details"] = self.details
        return body


def normalize_categories(value) -> List[str]:
    """Accepts a list, a comma-joined string or anything else; never returns an empty list."""
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",")]
    return normalize_category_list(value)


def normalize_post(post: Optional[dict]) -> Optional[dict]:
    if not isinstance(post, dict):
        return post
    return {**post, "categories": normalize_categories(post.get("categories"))}


def normalize_posts(posts) -> List[dict]:
    return [normalize_post(post) for post in posts or []]


def format_error_message(error) -> str:
    if isinstance(error, ApiError):
        return error.message or "An unexpected error occurred"
    if isinstance(error, Exception):
        return str(error) or "An unexpected error occurred"
    if isinstance(error, str):
        return error
    log.warning(f"Received unknown error type: {type(error).__name__}")
    return "An unexpected error occurred"


class TokenStore:
    """Where the client keeps credentials between calls."""

    def get_token(self) -> Optional[str]:
        raise NotImplementedError

    def get_refresh_token(self) -> Optional[str]:
        raise NotImplementedError

    def get_administrator(self) -> Optional[dict]:
        raise NotImplementedError

    def save(self, access_token: str, refresh_token: str = None, administrator: dict = None) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class InMemoryTokenStore(TokenStore):
    def __init__(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.administrator = None

    def get_token(self) -> Optional[str]:
        return self.access_token

    def get_refresh_token(self) -> Optional[str]:
        return self.refresh_token

    def get_administrator(self) -> Optional[dict]:
        return self.administrator

    def save(self, access_token: str, refresh_token: str = None, administrator: dict = None) -> None:
        self.access_token = access_token
        if refresh_token is not None:
            self.refresh_token = refresh_token
        if administrator is not None:
            self.administrator = administrator

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.administrator = None


def redirect_to_login() -> None:
    log.info("Session expired, redirecting to /login")


class BlogClient:
    def __init__(
        self,
        base_url: str = None,
        token_store: TokenStore = None,
        on_unauthorized: Callable[[], None] = None,
        timeout: int = None,
        session: requests.Session = None,
    ) -> None:
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.token_store = token_store or InMemoryTokenStore()
        self.on_unauthorized = on_unauthorized or redirect_to_login
        self.timeout = timeout or settings.CLIENT_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token_store.get_token())

    def _headers(self, auth: bool) -> dict:
        headers = {"Content-Type": "application/json"}
        token = self.token_store.get_token() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _handle_unauthorized(self) -> None:
        self.token_store.clear()
        self.on_unauthorized()

    @staticmethod
    def _http_error(response: requests.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return ApiError(
            body.get("message") or response.reason or "An error occurred",
            response.status_code,
            error=body.get("error"),
            details=body.get("details"),
        )

    def _send(self, method: str, path: str, *, auth: bool = False, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=self._headers(auth), timeout=self.timeout, **kwargs)
        except requests.Timeout:
            raise ApiError("Request timeout - please check if the backend server is running", 408)
        except requests.ConnectionError:
            raise ApiError("Connection refused - backend server may not be running", 503)
        except requests.RequestException as ex:
            raise ApiError(str(ex) or "Network error", 500)

        if response.status_code == 401 and auth:
            self._handle_unauthorized()
        if not response.ok:
            if response.status_code != 404:
                log.error(f"API error: {method} {path} -> {response.status_code}")
            raise self._http_error(response)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            log.error(f"Non-JSON response: {method} {path} -> {response.status_code}")
            raise ApiError("Invalid response from server", 500, error="Invalid Response")

    def request(self, method: str, path: str, *, auth: bool = False, fallback: bool = None, **kwargs) -> dict:
        """
        Tries the /api path first. Reads then retry the legacy path without the
        prefix on a 404; writes never do unless fallback=True.
        """
        if fallback is None:
            fallback = method.upper() == "GET"
        candidates = (f"{API_PREFIX}{path}", path) if fallback else (f"{API_PREFIX}{path}",)

        attempted = []
        last_error = None
        for candidate in candidates:
            try:
                return self._send(method, candidate, auth=auth, **kwargs)
            except ApiError as ex:
                attempted.append(candidate)
                last_error = ex
                if ex.status_code != 404:
                    raise

        log.warning(f"All endpoints failed. Attempted: {', '.join(attempted)}")
        raise last_error

    # Auth

    def login(self, email: str, password: str) -> dict:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})["data"]
        self.token_store.save(data["access_token"], data.get("refresh_token"), data.get("administrator"))
        return data

    def refresh(self) -> str:
        refresh_token = self.token_store.get_refresh_token()
        if not refresh_token:
            raise ApiError("No refresh token available", 401)
        data = self.request("POST", "/auth/refresh", json={"refresh_token": refresh_token})["data"]
        self.token_store.save(data["access_token"])
        return data["access_token"]

    def logout(self) -> None:
        self.token_store.clear()

    def get_profile(self) -> dict:
        return self.request("GET", "/auth/profile", auth=True)["data"]

    # Public reads

    def get_published_posts(self) -> List[dict]:
        return normalize_posts(self.request("GET", "/blog/published").get("data"))

    def get_published_count(self) -> int:
        return self.request("GET", "/blog/published").get("count") or 0

    def get_featured_posts(self, limit: int = None) -> List[dict]:
        params = {"limit": limit} if limit else None
        return normalize_posts(self.request("GET", "/blog/featured", params=params).get("data"))

    def get_recent_posts(self, limit: int = None) -> List[dict]:
        params = {"limit": limit} if limit else None
        return normalize_posts(self.request("GET", "/blog/recent", params=params).get("data"))

    def get_posts_by_category(self, category: str) -> List[dict]:
        return normalize_posts(self.request("GET", f"/blog/category/{category}").get("data"))

    def search_posts(self, term: str, only_published: bool = True) -> List[dict]:
        params = {"q": term, "published": str(only_published).lower()}
        return normalize_posts(self.request("GET", "/blog/search", params=params).get("data"))

    def get_post_by_slug(self, slug: str) -> Optional[dict]:
        try:
            return normalize_post(self.request("GET", f"/blog/slug/{slug}").get("data"))
        except ApiError as ex:
            if ex.status_code == 404:
                return None
            raise

    def increment_view_count(self, slug: str) -> int:
        try:
            return self.request("POST", f"/blog/slug/{slug}/view").get("view_count") or 0
        except ApiError as ex:
            log.warning(f"Could not increment view count for {slug}: {ex.message}")
            return 0

    # Admin

    def get_all_posts(
        self,
        page: int = None,
        limit: int = None,
        search: str = None,
        is_published: bool = None,
        is_featured: bool = None,
        categories: List[str] = None,
    ) -> dict:
        params = {}
        if page:
            params["page"] = page
        if limit:
            params["limit"] = limit
        if search:
            params["search"] = search
        if is_published is not None:
            params["is_published"] = str(is_published).lower()
        if is_featured is not None:
            params["is_featured"] = str(is_featured).lower()
        if categories:
            params["categories"] = ",".join(categories)

        body = self.request("GET", "/blog", auth=True, params=params)
        count = body.get("count") or 0
        page_size = limit or 10
        return {
            "posts": normalize_posts(body.get("data")),
            "count": count,
            "total_pages": body.get("total_pages", (count + page_size - 1) // page_size),
        }

    def get_post_by_id(self, post_id: str) -> dict:
        return normalize_post(self.request("GET", f"/blog/{post_id}", auth=True)["data"])

    def get_statistics(self) -> dict:
        return self.request("GET", "/blog/statistics", auth=True)["data"]

    def create_post(self, data: dict) -> dict:
        return normalize_post(self.request("POST", "/blog", auth=True, json=data)["data"])

    def update_post(self, post_id: str, data: dict) -> dict:
        return normalize_post(self.request("PATCH", f"/blog/{post_id}", auth=True, json=data)["data"])

    def delete_post(self, post_id: str) -> None:
        self.request("DELETE", f"/blog/{post_id}", auth=True)

    # Contact

    def submit_contact(self, first_name: str, last_name: str, email: str, message: str) -> dict:
        body = self.request("POST", "/contact", json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "message": message,
        })
        return {"success": bool((body.get("data") or {}).get("success")), "message": body.get("message")}
