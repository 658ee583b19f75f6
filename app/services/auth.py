import re
from datetime import timedelta
from sqlmodel import Session
from fastapi import HTTPException, status
from jose import jwt, JWTError

from app.models.administrator import Administrator
from app.services.administrator import AdministratorService
from app.core.config import settings
from app.core.dates import utc_now
from app.core.logging import get_logger

logger = get_logger(__name__)

DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class ConfigurationError(RuntimeError):
    pass


def parse_duration(value) -> timedelta:
    """Turns "24h", "7d", "15m", "30s" or bare seconds into a timedelta."""
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = DURATION_PATTERN.match(str(value or ""))
    if not match:
        raise ConfigurationError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * DURATION_UNITS[unit.lower()])


class TokenIssuer:
    def __init__(
        self,
        secret: str = None,
        refresh_secret: str = None,
        algorithm: str = None,
        expires_in: str = None,
        refresh_expires_in: str = None,
    ):
        self.secret = secret or settings.JWT_SECRET
        self.refresh_secret = refresh_secret or settings.JWT_REFRESH_SECRET
        if not self.secret or not self.refresh_secret:
            raise ConfigurationError("JWT secrets are not configured properly")

        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expires = parse_duration(expires_in or settings.JWT_EXPIRES_IN)
        self.refresh_expires = parse_duration(refresh_expires_in or settings.JWT_REFRESH_EXPIRES_IN)

    def _encode(self, claims: dict, secret: str, lifetime: timedelta) -> str:
        to_encode = claims.copy()
        to_encode.update({"exp": utc_now() + lifetime})
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def issue_access(self, claims: dict) -> str:
        return self._encode(claims, self.secret, self.expires)

    def issue_refresh(self, claims: dict) -> str:
        return self._encode(claims, self.refresh_secret, self.refresh_expires)

    def verify_access_token(self, token: str) -> dict:
        """Raises JWTError on a bad signature or expiry."""
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])

    def verify_refresh_token(self, token: str) -> dict:
        return jwt.decode(token, self.refresh_secret, algorithms=[self.algorithm])


class AuthService:
    def __init__(self, session: Session, issuer: TokenIssuer = None):
        self.session = session
        self.issuer = issuer or TokenIssuer()
        self.administrators = AdministratorService(session)

    def login(self, email: str, password: str) -> dict:
        administrator = self.administrators.validate_login(email, password)
        claims = administrator.to_claims()
        logger.info(f"Administrator {administrator.id} logged in")
        return {
            "access_token": self.issuer.issue_access(claims),
            "refresh_token": self.issuer.issue_refresh(claims),
            "administrator": administrator.to_response(),
        }

    def refresh(self, refresh_token: str) -> dict:
        invalid = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token"
        )
        try:
            payload = self.issuer.verify_refresh_token(refresh_token)
        except JWTError:
            raise invalid

        administrator_id = payload.get("sub")
        if not administrator_id:
            raise invalid
        try:
            administrator = self.administrators.find_one(administrator_id)
        except HTTPException:
            raise invalid

        return {"access_token": self.issuer.issue_access(administrator.to_claims())}

    def resolve_access_token(self, token: str) -> Administrator:
        """Claims are only trusted while the administrator is still active."""
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
        try:
            payload = self.issuer.verify_access_token(token)
        except JWTError:
            raise credentials_exception

        administrator_id = payload.get("sub")
        if administrator_id is None:
            raise credentials_exception

        try:
            return self.administrators.find_one(administrator_id)
        except HTTPException:
            raise credentials_exception
