"""
Admin authentication

A single signed JWT in the ``admin-token`` cookie gates the admin pages and
every non-GET call on the API. Verification is stateless: signature and
expiry only, no session lookup.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from starlette.middleware.base import BaseHTTPMiddleware

from settings import Settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Non-GET API calls that site visitors (or a logged-out admin) may make
PUBLIC_API_WRITES = {
    ("POST", "/api/contact"),
    ("POST", "/api/auth"),
    ("DELETE", "/api/auth"),
    ("POST", "/api/auth/reset-password"),
    ("PUT", "/api/auth/reset-password"),
    # Bootstrap only: refused once any admin exists
    ("POST", "/api/admin/settings"),
}
SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: Optional[str], settings: Settings) -> Optional[Dict[str, Any]]:
    """Return the token payload, or None when missing, tampered with or expired."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("role") != "admin" or not payload.get("sub"):
        return None
    return payload


def set_admin_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.admin_cookie_name,
        value=token,
        httponly=True,
        path="/",
        max_age=settings.access_token_expire_minutes * 60,
        samesite="strict",
        secure=settings.cookie_secure,
    )


def clear_admin_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.admin_cookie_name, path="/")


def issue_admin_session(response: Response, admin: Dict[str, Any], settings: Settings) -> None:
    token = create_access_token({"sub": admin["username"], "id": str(admin["_id"]), "role": "admin"}, settings)
    set_admin_cookie(response, token, settings)


def current_admin(request: Request) -> Optional[Dict[str, Any]]:
    settings: Settings = request.app.state.settings
    return decode_access_token(request.cookies.get(settings.admin_cookie_name), settings)


def require_admin(request: Request) -> Dict[str, Any]:
    payload = current_admin(request)
    if payload is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return payload


def login_redirect(request: Request) -> RedirectResponse:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(url=f"/login?next={quote(target, safe='')}", status_code=303)


def is_admin_page(path: str) -> bool:
    return path == "/admin" or path.startswith("/admin/")


def is_protected_api_call(method: str, path: str) -> bool:
    if not path.startswith("/api/") or method in SAFE_METHODS:
        return False
    return (method, path.rstrip("/")) not in PUBLIC_API_WRITES


class AdminAuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        admin_page = is_admin_page(path)
        if admin_page or is_protected_api_call(request.method, path):
            if current_admin(request) is None:
                logger.info("Unauthenticated %s %s rejected", request.method, path)
                if admin_page:
                    return login_redirect(request)
                return JSONResponse(status_code=401, content={"detail": "Not authenticated"})
        return await call_next(request)
