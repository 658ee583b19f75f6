from functools import lru_cache
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from app.db.session import get_session
from app.models.administrator import Administrator
from app.schemas.administrator import LoginRequest, RefreshRequest
from app.services.auth import AuthService, TokenIssuer
from app.core.responses import envelope

router = APIRouter()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer()


def get_auth_service(
    session: Session = Depends(get_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(session, issuer)


def get_current_administrator(
    token: str = Depends(oauth2_scheme),
    service: AuthService = Depends(get_auth_service),
) -> Administrator:
    return service.resolve_access_token(token)


@router.post("/login")
def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Exchange credentials for an access and a refresh token."""
    return envelope("Login successful", service.login(data.email, data.password))


@router.post("/refresh")
def refresh(data: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    return envelope("Token refreshed successfully", service.refresh(data.refresh_token))


@router.get("/profile")
def profile(current_administrator: Administrator = Depends(get_current_administrator)):
    return envelope("Profile retrieved successfully", current_administrator.to_response())


@router.get("/verify")
def verify(current_administrator: Administrator = Depends(get_current_administrator)):
    return envelope("Token is valid", {
        "administrator": current_administrator.to_response(),
        "is_valid": True,
    })
