"""Display helpers for posts fetched through the blog client. None of them touch the network."""
import math
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from app.models.blog import generate_slug as slugify

WORDS_PER_MINUTE = 225
TAG_PATTERN = re.compile(r"<[^>]*>")
IMAGE_URL_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)$", re.IGNORECASE)


def parse_date(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def strip_html(content: str) -> str:
    return TAG_PATTERN.sub("", content or "")


def get_excerpt(post: dict, max_length: int = 150) -> str:
    if post.get("excerpt"):
        return post["excerpt"]
    text = strip_html(post.get("content"))
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def get_reading_time(content: str) -> int:
    words = strip_html(content).split()
    return max(1, math.ceil(len(words) / WORDS_PER_MINUTE))


def format_reading_time(content: str) -> str:
    return f"{get_reading_time(content)} min read"


def format_date(value) -> str:
    date = parse_date(value)
    if date is None:
        return "Invalid date"
    return f"{date.strftime('%B')} {date.day}, {date.year}"


def format_date_time(value) -> str:
    date = parse_date(value)
    if date is None:
        return "Invalid date"
    return f"{date.strftime('%b')} {date.day}, {date.year}, {date.strftime('%I:%M %p')}"


def format_relative_date(value, now: datetime = None) -> str:
    date = parse_date(value)
    if date is None:
        return "Invalid date"
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = (now - date).total_seconds()
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = int(seconds // 86400)
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return format_date(date)


def format_view_count(view_count: int) -> str:
    if view_count < 1000:
        return str(view_count)
    if view_count < 1000000:
        return f"{view_count / 1000:.1f}k"
    return f"{view_count / 1000000:.1f}M"


def truncate_title(title: str, max_length: int = 60) -> str:
    if len(title) <= max_length:
        return title
    return title[:max_length].strip() + "..."


def get_author_name(post: dict) -> str:
    author = post.get("author")
    if not author:
        return "Unknown Author"
    return f"{author.get('first_name', '')} {author.get('last_name', '')}".strip()


def get_author_initials(post: dict) -> str:
    author = post.get("author")
    if not author:
        return "UA"
    return f"{(author.get('first_name') or ' ')[0]}{(author.get('last_name') or ' ')[0]}".strip().upper()


def validate_image_url(url: str) -> bool:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return bool(IMAGE_URL_PATTERN.search(parsed.path))


def generate_slug(title: str) -> str:
    return slugify(title) if title else ""


def is_post_published(post: dict) -> bool:
    return bool(post.get("is_published") and post.get("published_at"))


def filter_posts(
    posts: Iterable[dict],
    search: str = None,
    category: str = None,
    status: str = None,
) -> List[dict]:
    """Client-side filtering of an already fetched list.

    status is one of "published", "draft" or "featured".
    """
    term = (search or "").strip().lower()
    result = []
    for post in posts:
        if term:
            haystack = " ".join([
                post.get("title") or "",
                post.get("excerpt") or "",
                strip_html(post.get("content")),
            ]).lower()
            if term not in haystack:
                continue
        if category and category not in (post.get("categories") or []):
            continue
        if status == "published" and not post.get("is_published"):
            continue
        if status == "draft" and post.get("is_published"):
            continue
        if status == "featured" and not post.get("is_featured"):
            continue
        result.append(post)
    return result
