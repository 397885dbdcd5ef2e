import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import Settings
from .errors import ConfigurationError, InvalidCredentialsError, InvalidTokenError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthResult:
    username: str
    role: str
    token: str


class AuthService:
    """Checks the configured administrator credentials and issues tokens."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _signing_key(self) -> str:
        if not self.settings.secret_key:
            logger.error("Token signing secret is not configured (AUTH_SECRET_KEY)")
            raise ConfigurationError()
        return self.settings.secret_key

    def validate_user(self, username: str, password: str) -> Optional[str]:
        """Return the user's role, or None when the credentials don't match."""
        valid_username = self.settings.admin_username
        valid_password = self.settings.admin_password
        if valid_username is None or valid_password is None:
            return None
        if username == valid_username and password == valid_password:
            return ADMIN_ROLE
        return None

    def create_access_token(self, sub: str, role: str, expires_delta: timedelta = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.settings.access_token_expire_minutes))
        to_encode = {
            "sub": sub,
            "role": role,
            "jti": str(uuid.uuid4()),
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self._signing_key(), algorithm=self.settings.algorithm)

    def authenticate(self, username: str, password: str) -> AuthResult:
        role = self.validate_user(username, password)
        if role is None:
            logger.warning("Authentication failed for user: %s", username)
            raise InvalidCredentialsError()
        token = self.create_access_token(sub=username, role=role)
        logger.info("User %s authenticated successfully.", username)
        return AuthResult(username=username, role=role, token=token)

    def decode_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self._signing_key(),
                algorithms=[self.settings.algorithm],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
            )
        except JWTError as exc:
            raise InvalidTokenError() from exc
        if payload.get("sub") is None:
            raise InvalidTokenError()
        return payload


def get_auth_service(request: Request) -> AuthService:
    return AuthService(request.app.state.settings)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        return auth_service.decode_token(credentials.credentials)
    except InvalidTokenError:
        raise credentials_exception


def require_role(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory: a valid token whose ``role`` claim is one of ``roles``."""

    def _role_dependency(claims: Dict[str, Any] = Depends(get_current_claims)) -> Dict[str, Any]:
        if claims.get("role") not in roles:
            logger.warning("User %s with role %s denied; requires %s", claims.get("sub"), claims.get("role"), roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return claims

    return _role_dependency


require_admin = require_role(ADMIN_ROLE)
