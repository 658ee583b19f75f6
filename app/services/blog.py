import re
from datetime import timedelta
from typing import List, Optional
from sqlmodel import Session, select, func, or_
from sqlalchemy import String, cast, false, update
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status

from app.models.blog import (
    BlogPost,
    CATEGORY_VALUES,
    generate_slug,
    normalize_categories,
)
from app.services.administrator import AdministratorService
from app.core.dates import utc_now
from app.core.logging import get_logger

logger = get_logger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
MAX_LIST_LIMIT = 50
MAX_PAGE_SIZE = 100
RECENT_DAYS = 7

# Fields a PATCH may explicitly clear by sending null
NULLABLE_FIELDS = {
    "excerpt",
    "featured_image",
    "uploaded_image",
    "uploaded_image_filename",
    "uploaded_image_content_type",
}


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def category_pattern(category: str) -> str:
    # Matches the quoted value inside the serialized JSON array
    return f'%"{category}"%'


class BlogPostService:
    def __init__(self, session: Session):
        self.session = session
        self.administrators = AdministratorService(session)

    # Validation

    def validate_identifier(self, value: Optional[str], label: str = "author ID"):
        if not value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label[0].upper()}{label[1:]} is required")
        if not UUID_PATTERN.match(value):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label} format")

    def validate_category(self, category: str):
        if category not in CATEGORY_VALUES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")

    # Slugs

    def is_slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = select(BlogPost.id).where(BlogPost.slug == slug)
        if exclude_id:
            query = query.where(BlogPost.id != exclude_id)
        return self.session.exec(query).first() is not None

    def generate_unique_slug(self, title: str, exclude_id: Optional[str] = None) -> str:
        try:
            base_slug = generate_slug(title)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not base_slug:
            # Titles made only of punctuation still need a usable slug
            base_slug = "post"

        slug = base_slug
        counter = 1
        while self.is_slug_taken(slug, exclude_id):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug

    # Shaping

    def _to_responses(self, posts: List[BlogPost]) -> List[dict]:
        authors = self.administrators.find_many(post.author_id for post in posts)
        return [post.to_response(authors.get(post.author_id)) for post in posts]

    def _to_response(self, post: BlogPost) -> dict:
        return self._to_responses([post])[0]

    def _safe_list(self, query, label: str) -> List[dict]:
        """Public lists degrade to an empty result when the store misbehaves."""
        try:
            return self._to_responses(self.session.exec(query).all())
        except SQLAlchemyError:
            logger.error(f"Error finding {label} posts", exc_info=True)
            self.session.rollback()
            return []

    def _safe_count(self, query, label: str) -> int:
        try:
            return self.session.exec(query).one() or 0
        except SQLAlchemyError:
            logger.error(f"Error counting {label} posts", exc_info=True)
            self.session.rollback()
            return 0

    def _get(self, post_id: str) -> BlogPost:
        self.validate_identifier(post_id, "blog post ID")
        post = self.session.get(BlogPost, post_id)
        if not post:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Blog post with ID {post_id} not found")
        return post

    def _published_by_slug(self, slug: Optional[str]) -> BlogPost:
        if not slug or not slug.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Valid slug is required")
        slug = slug.strip()
        post = self.session.exec(
            select(BlogPost)
            .where(BlogPost.slug == slug)
            .where(BlogPost.is_published == True)
        ).first()
        if not post:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f'Published blog post with slug "{slug}" not found'
            )
        return post

    # Writes

    def create(self, data: dict, author_id: str) -> dict:
        self.validate_identifier(author_id)

        is_published = bool(data.get("is_published"))
        is_featured = bool(data.get("is_featured"))
        if is_featured and not is_published:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot feature an unpublished post")

        post = BlogPost(
            title=data["title"].strip(),
            slug=self.generate_unique_slug(data["title"]),
            content=data["content"].strip(),
            excerpt=(data.get("excerpt") or "").strip() or None,
            featured_image=data.get("featured_image") or None,
            uploaded_image=data.get("uploaded_image") or None,
            uploaded_image_filename=data.get("uploaded_image_filename") or None,
            uploaded_image_content_type=data.get("uploaded_image_content_type") or None,
            is_published=is_published,
            is_featured=is_featured,
            view_count=0,
            categories=normalize_categories(data.get("categories")),
            author_id=author_id,
            published_at=utc_now() if is_published else None,
        )
        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)
        logger.info(f"Blog post created with ID: {post.id}, categories: {', '.join(post.categories)}")
        return self.find_one(post.id)

    def update(self, post_id: str, patch: dict) -> dict:
        post = self._get(post_id)

        is_published = patch.get("is_published")
        is_featured = patch.get("is_featured")
        will_be_published = post.is_published if is_published is None else is_published
        if is_featured and not will_be_published:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot feature an unpublished post")

        title = patch.get("title")
        if title and title != post.title:
            post.slug = self.generate_unique_slug(title, exclude_id=post.id)
            post.title = title

        if patch.get("content"):
            post.content = patch["content"]

        if patch.get("categories") is not None:
            post.categories = normalize_categories(patch["categories"])

        for field in NULLABLE_FIELDS:
            if field in patch:
                setattr(post, field, patch[field] or None)

        if is_published is True:
            if not post.is_published and not post.published_at:
                post.published_at = utc_now()
            post.is_published = True
        elif is_published is False:
            post.is_published = False
            post.published_at = None
            post.is_featured = False

        if is_featured is not None and post.is_published:
            post.is_featured = is_featured

        self.session.add(post)
        self.session.commit()
        logger.info(f"Blog post updated with ID: {post.id}")
        return self.find_one(post.id)

    def remove(self, post_id: str) -> dict:
        post = self._get(post_id)
        self.session.delete(post)
        self.session.commit()
        logger.info(f"Blog post deleted with ID: {post_id}")
        return {"message": "Blog post deleted successfully"}

    def increment_view_by_slug(self, slug: str) -> int:
        post = self._published_by_slug(slug)
        self.session.exec(
            update(BlogPost)
            .where(BlogPost.id == post.id)
            .values(view_count=BlogPost.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return self.session.exec(select(BlogPost.view_count).where(BlogPost.id == post.id)).one()

    # Reads

    def find_one(self, post_id: str) -> dict:
        return self._to_response(self._get(post_id))

    def find_by_slug(self, slug: str) -> dict:
        return self._to_response(self._published_by_slug(slug))

    def find_all(self, query) -> dict:
        page = max(query.page or 1, 1)
        limit = clamp(query.limit or 10, 1, MAX_PAGE_SIZE)

        statement = select(BlogPost)
        if query.search and query.search.strip():
            term = query.search.strip()
            statement = statement.where(or_(
                BlogPost.title.icontains(term, autoescape=True),
                BlogPost.content.icontains(term, autoescape=True),
                BlogPost.excerpt.icontains(term, autoescape=True),
            ))
        if query.is_published is not None:
            statement = statement.where(BlogPost.is_published == query.is_published)
        if query.is_featured is not None:
            statement = statement.where(BlogPost.is_featured == query.is_featured)
        if query.author_id:
            self.validate_identifier(query.author_id)
            statement = statement.where(BlogPost.author_id == query.author_id)
        if query.categories:
            wanted = [category for category in query.categories if category in CATEGORY_VALUES]
            if wanted:
                statement = statement.where(or_(
                    *[cast(BlogPost.categories, String).like(category_pattern(category)) for category in wanted]
                ))
            else:
                # Only unknown categories requested, nothing can match
                statement = statement.where(false())

        total = self.session.exec(select(func.count()).select_from(statement.subquery())).one()
        posts = self.session.exec(
            statement
            .order_by(BlogPost.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()

        return {
            "data": self._to_responses(posts),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": (total + limit - 1) // limit,
        }

    def find_by_category(self, category: str, published_only: bool = True) -> List[dict]:
        self.validate_category(category)

        statement = (
            select(BlogPost)
            .where(cast(BlogPost.categories, String).like(category_pattern(category)))
            .order_by(BlogPost.published_at.desc())
        )
        if published_only:
            statement = statement.where(BlogPost.is_published == True)

        try:
            posts = self.session.exec(statement).all()
        except SQLAlchemyError:
            logger.error(f"Error finding posts by category {category}", exc_info=True)
            self.session.rollback()
            return []

        # The pattern match only narrows rows, membership decides
        matched = [post for post in posts if post.has_category(category)]
        logger.debug(f"{len(matched)} of {len(posts)} candidate posts in category {category}")
        return self._to_responses(matched)

    def find_published(self) -> List[dict]:
        return self._safe_list(
            select(BlogPost)
            .where(BlogPost.is_published == True)
            .order_by(BlogPost.published_at.desc()),
            "published",
        )

    def find_featured(self, limit: int = 3) -> List[dict]:
        return self._safe_list(
            select(BlogPost)
            .where(BlogPost.is_published == True)
            .where(BlogPost.is_featured == True)
            .order_by(BlogPost.published_at.desc())
            .limit(clamp(limit, 1, MAX_LIST_LIMIT)),
            "featured",
        )

    def find_recent(self, limit: int = 5) -> List[dict]:
        return self._safe_list(
            select(BlogPost)
            .where(BlogPost.is_published == True)
            .order_by(BlogPost.published_at.desc())
            .limit(clamp(limit, 1, MAX_LIST_LIMIT)),
            "recent",
        )

    def find_by_author(self, author_id: str, include_unpublished: bool = False) -> List[dict]:
        self.validate_identifier(author_id)
        statement = select(BlogPost).where(BlogPost.author_id == author_id)
        if not include_unpublished:
            statement = statement.where(BlogPost.is_published == True)
        return self._safe_list(statement.order_by(BlogPost.created_at.desc()), "author")

    def search_posts(self, term: Optional[str], only_published: bool = True) -> List[dict]:
        if not term or len(term.strip()) < 2:
            return []
        term = term.strip()

        statement = (
            select(BlogPost)
            .where(or_(
                BlogPost.title.icontains(term, autoescape=True),
                BlogPost.content.icontains(term, autoescape=True),
                BlogPost.excerpt.icontains(term, autoescape=True),
            ))
            .order_by(BlogPost.published_at.desc())
            .limit(MAX_LIST_LIMIT)
        )
        if only_published:
            statement = statement.where(BlogPost.is_published == True)
        return self._safe_list(statement, "matching")

    # Counters

    def count(self) -> int:
        return self._safe_count(select(func.count(BlogPost.id)), "all")

    def count_published(self) -> int:
        return self._safe_count(
            select(func.count(BlogPost.id)).where(BlogPost.is_published == True),
            "published",
        )

    def count_drafts(self) -> int:
        return self._safe_count(
            select(func.count(BlogPost.id)).where(BlogPost.is_published == False),
            "draft",
        )

    def count_featured(self) -> int:
        return self._safe_count(
            select(func.count(BlogPost.id))
            .where(BlogPost.is_published == True)
            .where(BlogPost.is_featured == True),
            "featured",
        )

    def count_recently_published(self, days: int = RECENT_DAYS) -> int:
        since = utc_now() - timedelta(days=days)
        return self._safe_count(
            select(func.count(BlogPost.id))
            .where(BlogPost.is_published == True)
            .where(BlogPost.published_at > since),
            "recently published",
        )

    def count_by_category(self, category: str) -> int:
        self.validate_category(category)
        try:
            rows = self.session.exec(
                select(BlogPost.categories)
                .where(BlogPost.is_published == True)
                .where(cast(BlogPost.categories, String).like(category_pattern(category)))
            ).all()
        except SQLAlchemyError:
            logger.error(f"Error counting posts in category {category}", exc_info=True)
            self.session.rollback()
            return 0
        return sum(1 for categories in rows if isinstance(categories, list) and category in categories)

    def total_views(self) -> int:
        return self._safe_count(
            select(func.coalesce(func.sum(BlogPost.view_count), 0))
            .where(BlogPost.is_published == True),
            "viewed",
        )

    def get_statistics(self) -> dict:
        return {
            "total": self.count(),
            "published": self.count_published(),
            "drafts": self.count_drafts(),
            "featured": self.count_featured(),
            "recently_published": self.count_recently_published(),
            "total_views": self.total_views(),
            "by_category": {category: self.count_by_category(category) for category in CATEGORY_VALUES},
        }

    def get_category_debug_info(self) -> dict:
        rows = self.session.exec(select(BlogPost.categories, BlogPost.is_published)).all()

        distribution = {}
        invalid_format = 0
        for categories, _ in rows:
            if not isinstance(categories, list):
                invalid_format += 1
                continue
            for category in categories:
                distribution[category] = distribution.get(category, 0) + 1

        info = {
            "total_posts": len(rows),
            "published_posts": sum(1 for _, is_published in rows if is_published),
            "category_distribution": distribution,
            "invalid_category_format": invalid_format,
        }
        for category in CATEGORY_VALUES:
            info[f"category_{category}"] = len(self.find_by_category(category, True))
        return info
