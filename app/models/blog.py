import re
import uuid
from enum import Enum
from typing import List, Optional
from datetime import datetime
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import DateTime, JSON, Text

from app.core.dates import utc_now

class BlogCategory(str, Enum):
    NEWSROOM = "newsroom"
    THOUGHT_PIECES = "thought-pieces"
    ACHIEVEMENTS = "achievements"
    AWARDS_RECOGNITION = "awards-recognition"

DEFAULT_CATEGORIES = [BlogCategory.NEWSROOM.value]
CATEGORY_VALUES = [category.value for category in BlogCategory]
MAX_CATEGORIES = 4

def normalize_categories(categories) -> List[str]:
    """Dedupe and drop unknown values; never returns an empty list."""
    if not categories or not isinstance(categories, (list, tuple)):
        return list(DEFAULT_CATEGORIES)

    valid = []
    for category in categories:
        value = category.value if isinstance(category, BlogCategory) else category
        if value in CATEGORY_VALUES and value not in valid:
            valid.append(value)

    return valid or list(DEFAULT_CATEGORIES)

def generate_slug(title: str) -> str:
    if not title or not isinstance(title, str):
        raise ValueError("Title is required to generate slug")

    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")

class BlogPost(SQLModel, table=True):
    __tablename__ = "blog_posts"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)

    # Content
    title: str = Field(max_length=200)
    slug: str = Field(unique=True, index=True, max_length=255)  # URL-friendly title
    content: str = Field(sa_column=Column(Text, nullable=False))  # rich HTML
    excerpt: Optional[str] = Field(default=None, max_length=500)

    # Images
    featured_image: Optional[str] = Field(default=None, max_length=2048)
    uploaded_image: Optional[str] = Field(default=None, sa_column=Column(Text))  # base64 data URI
    uploaded_image_filename: Optional[str] = Field(default=None, max_length=255)
    uploaded_image_content_type: Optional[str] = Field(default=None, max_length=100)

    # Status
    is_published: bool = Field(default=False, index=True)
    is_featured: bool = Field(default=False)
    view_count: int = Field(default=0)

    # Categorization, e.g. ["newsroom", "achievements"]
    categories: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        sa_column=Column(JSON, nullable=False),
    )

    # Author
    author_id: str = Field(foreign_key="administrators.id", index=True, max_length=36)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utc_now},
    )
    published_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def has_category(self, category: str) -> bool:
        categories = self.categories
        if not categories:
            return False
        if not isinstance(categories, list):
            categories = [categories]
        return category in categories

    def to_response(self, author=None) -> dict:
        """Public shape of a post; categories are re-validated on the way out."""
        categories = self.categories if isinstance(self.categories, list) else None
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "excerpt": self.excerpt,
            "featured_image": self.featured_image,
            "uploaded_image": self.uploaded_image,
            "uploaded_image_filename": self.uploaded_image_filename,
            "uploaded_image_content_type": self.uploaded_image_content_type,
            "is_published": self.is_published,
            "is_featured": self.is_featured,
            "view_count": self.view_count,
            "categories": normalize_categories(categories),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "published_at": self.published_at,
            "author": author.to_author() if author else None,
        }
