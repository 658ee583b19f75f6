import re
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict

IMAGE_URL_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)$", re.IGNORECASE)
IMAGE_CONTENT_TYPE_PATTERN = re.compile(r"^image/(jpeg|jpg|png|gif|webp)$", re.IGNORECASE)
DATA_URI_PATTERN = re.compile(r"^data:image/[a-z0-9.+-]+;base64,", re.IGNORECASE)
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def check_title(value: str) -> str:
    value = value.strip()
    if len(value) < 3:
        raise ValueError("Title must be at least 3 characters long")
    if len(value) > 200:
        raise ValueError("Title must be less than 200 characters")
    return value


def check_content(value: str) -> str:
    value = value.strip()
    if len(value) < 10:
        raise ValueError("Content must be at least 10 characters long")
    return value


def check_excerpt(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > 500:
        raise ValueError("Excerpt must be less than 500 characters")
    return value


def check_featured_image(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not URL_PATTERN.match(value):
        raise ValueError("Featured image must be a valid URL")
    if not IMAGE_URL_PATTERN.search(value):
        raise ValueError("Featured image must be a valid image URL")
    return value


def check_uploaded_image(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not DATA_URI_PATTERN.match(value):
        raise ValueError("Uploaded image must be a base64 encoded image data URI")
    return value


def check_filename(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > 255:
        raise ValueError("Filename must be less than 255 characters")
    return value or None


def check_content_type(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not IMAGE_CONTENT_TYPE_PATTERN.match(value):
        raise ValueError("Content type must be a valid image MIME type")
    return value


def coerce_categories(value):
    # A bare or comma-joined string is split into a list; normalization happens in the service
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


Title = Annotated[str, AfterValidator(check_title)]
Content = Annotated[str, AfterValidator(check_content)]
Excerpt = Annotated[Optional[str], AfterValidator(check_excerpt)]
FeaturedImage = Annotated[Optional[str], AfterValidator(check_featured_image)]
UploadedImage = Annotated[Optional[str], AfterValidator(check_uploaded_image)]
Filename = Annotated[Optional[str], AfterValidator(check_filename)]
ContentType = Annotated[Optional[str], AfterValidator(check_content_type)]
Categories = Annotated[Optional[List[str]], BeforeValidator(coerce_categories)]


class BlogPostCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Title
    content: Content
    excerpt: Excerpt = None
    featured_image: FeaturedImage = None
    uploaded_image: UploadedImage = None
    uploaded_image_filename: Filename = None
    uploaded_image_content_type: ContentType = None
    is_published: bool = False
    is_featured: bool = False
    categories: Categories = None


class BlogPostUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[Title] = None
    content: Optional[Content] = None
    excerpt: Excerpt = None
    featured_image: FeaturedImage = None
    uploaded_image: UploadedImage = None
    uploaded_image_filename: Filename = None
    uploaded_image_content_type: ContentType = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    categories: Categories = None


class BlogPostQuery(BaseModel):
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    author_id: Optional[str] = None
    categories: Optional[List[str]] = None
