import asyncio
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.db.session import create_db_and_tables
from app.core.config import settings
from app.core.errors import error_body, register_exception_handlers
from app.core.limits import BodySizeLimitMiddleware
from app.core.logging import get_logger

logger = get_logger(__name__)

WRITE_METHODS = {"POST", "PATCH", "PUT"}

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuses to start without both JWT secrets
    auth.get_token_issuer()
    create_db_and_tables()
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
    description="API for the Aithena website: blog, administrators and contact form"
)

register_exception_handlers(app)
app.add_middleware(BodySizeLimitMiddleware)

@app.middleware("http")
async def request_timeout(request: Request, call_next):
    # Writes may carry base64 images and get a longer budget
    if request.method in WRITE_METHODS:
        timeout = settings.WRITE_TIMEOUT_SECONDS
    else:
        timeout = settings.READ_TIMEOUT_SECONDS
    try:
        return await asyncio.wait_for(call_next(request), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{request.method} {request.url.path} timed out after {timeout}s")
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content=error_body(status.HTTP_504_GATEWAY_TIMEOUT, "Request timeout"),
        )

@app.get("/")
def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}. Visit /docs for Swagger UI."}

from app.routers import auth, administrators, blog, contact, health

@app.get("/health")
def root_health():
    return health.liveness()

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(administrators.router, prefix="/api/administrators", tags=["administrators"])
app.include_router(blog.router, prefix="/api/blog", tags=["blog"])
app.include_router(contact.router, prefix="/api/contact", tags=["contact"])
app.include_router(health.router, prefix="/api/health", tags=["health"])

# Add CORS
from fastapi.middleware.cors import CORSMiddleware
origins = [settings.FRONTEND_URL]
if settings.is_development:
    origins += ["http://localhost:3000", "http://127.0.0.1:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
