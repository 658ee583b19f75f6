from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.db.session import get_session
from app.models.administrator import Administrator
from app.routers.auth import get_current_administrator
from app.schemas.blog import BlogPostCreate, BlogPostQuery, BlogPostUpdate
from app.services.blog import BlogPostService
from app.core.responses import envelope
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


def get_blog_service(session: Session = Depends(get_session)) -> BlogPostService:
    return BlogPostService(session)


def split_categories(categories: Optional[List[str]]) -> Optional[List[str]]:
    # Accepts ?categories=a&categories=b as well as ?categories=a,b
    if not categories:
        return None
    return [part.strip() for value in categories for part in value.split(",") if part.strip()]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(
    data: BlogPostCreate,
    current_administrator: Administrator = Depends(get_current_administrator),
    service: BlogPostService = Depends(get_blog_service),
):
    post = service.create(data.model_dump(), current_administrator.id)
    return envelope("Blog post created successfully", post, status_code=status.HTTP_201_CREATED)


@router.get("")
def list_posts(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    is_published: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    author_id: Optional[str] = None,
    categories: Optional[List[str]] = Query(None),
    service: BlogPostService = Depends(get_blog_service),
):
    query = BlogPostQuery(
        page=page,
        limit=limit,
        search=search,
        is_published=is_published,
        is_featured=is_featured,
        author_id=author_id,
        categories=split_categories(categories),
    )
    result = service.find_all(query)
    return envelope(
        "Blog posts retrieved successfully",
        result["data"],
        count=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )


@router.get("/published")
def published_posts(service: BlogPostService = Depends(get_blog_service)):
    posts = service.find_published()
    return envelope("Published blog posts retrieved successfully", posts, count=service.count_published())


@router.get("/featured")
def featured_posts(limit: int = 3, service: BlogPostService = Depends(get_blog_service)):
    return envelope("Featured blog posts retrieved successfully", service.find_featured(limit))


@router.get("/recent")
def recent_posts(limit: int = 5, service: BlogPostService = Depends(get_blog_service)):
    return envelope("Recent blog posts retrieved successfully", service.find_recent(limit))


@router.get("/category/{category}")
def posts_by_category(category: str, service: BlogPostService = Depends(get_blog_service)):
    posts = service.find_by_category(category, True)
    return envelope(f"Blog posts for {category} retrieved successfully", posts, count=len(posts))


@router.get("/search")
def search_posts(
    q: Optional[str] = None,
    published: bool = True,
    service: BlogPostService = Depends(get_blog_service),
):
    if not q or len(q.strip()) < 2:
        return envelope("Search term too short", [], count=0)
    posts = service.search_posts(q, published)
    return envelope("Search results retrieved successfully", posts, count=len(posts))


@router.get("/statistics")
def statistics(service: BlogPostService = Depends(get_blog_service)):
    return envelope("Statistics retrieved successfully", service.get_statistics())


@router.get("/slug/{slug}")
def post_by_slug(slug: str, service: BlogPostService = Depends(get_blog_service)):
    return envelope("Blog post retrieved successfully", service.find_by_slug(slug))


@router.post("/slug/{slug}/view")
def increment_view(slug: str, service: BlogPostService = Depends(get_blog_service)):
    view_count = service.increment_view_by_slug(slug)
    return envelope("View count incremented successfully", view_count=view_count)


@router.get("/{post_id}")
def get_post(post_id: str, service: BlogPostService = Depends(get_blog_service)):
    return envelope("Blog post retrieved successfully", service.find_one(post_id))


@router.patch("/{post_id}")
def update_post(
    post_id: str,
    data: BlogPostUpdate,
    current_administrator: Administrator = Depends(get_current_administrator),
    service: BlogPostService = Depends(get_blog_service),
):
    logger.info(f"Administrator {current_administrator.id} updating blog post {post_id}")
    post = service.update(post_id, data.model_dump(exclude_unset=True))
    return envelope("Blog post updated successfully", post)


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    current_administrator: Administrator = Depends(get_current_administrator),
    service: BlogPostService = Depends(get_blog_service),
):
    logger.info(f"Administrator {current_administrator.id} deleting blog post {post_id}")
    result = service.remove(post_id)
    return envelope(result["message"])
