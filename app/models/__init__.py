# Import all models to register them with SQLModel
from app.models.administrator import Administrator, AdministratorStatus
from app.models.blog import BlogPost, BlogCategory

__all__ = [
    "Administrator",
    "AdministratorStatus",
    "BlogPost",
    "BlogCategory",
]
