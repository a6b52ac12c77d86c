import logging
import re
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pymongo.database import Database

from database import create_document, get_db, now, update_document
from errors import handle_errors
from schemas import (
    Admin,
    AdminCreate,
    AdminSettingsUpdate,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
)
from security import (
    clear_admin_cookie,
    current_admin,
    get_password_hash,
    issue_admin_session,
    require_admin,
    verify_password,
)
from settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

COLLECTION = "admin"
INVALID_CREDENTIALS = "Invalid username or password"
FORGOT_MESSAGE = "If the username exists, a reset link has been generated."
PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])")


def authenticate(db: Database, username: str, password: str) -> Optional[Dict[str, Any]]:
    admin = db[COLLECTION].find_one({"username": username})
    if admin is None or not verify_password(password, admin.get("password", "")):
        return None
    return admin


def check_password_strength(password: str) -> None:
    if len(password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters long")
    if not PASSWORD_RULE.match(password):
        raise HTTPException(
            status_code=400,
            detail="Password must contain at least one uppercase letter, one lowercase letter, "
                   "one number, and one special character",
        )


def public_admin(admin: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": str(admin["_id"]), "username": admin["username"], "email": admin.get("email", "")}


# ---------------------- Session ----------------------
@router.post("/api/auth")
def login(data: LoginRequest, request: Request, db: Database = Depends(get_db)):
    settings: Settings = request.app.state.settings
    with handle_errors("Authentication failed"):
        admin = authenticate(db, data.username, data.password)
        if admin is None:
            logger.info("Failed login for %s", data.username)
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
        response = JSONResponse({"success": True, "message": "Login successful"})
        issue_admin_session(response, admin, settings)
        return response


@router.get("/api/auth")
def auth_status(request: Request):
    if current_admin(request) is None:
        return JSONResponse(status_code=401, content={"authenticated": False})
    return {"authenticated": True}


@router.delete("/api/auth")
def logout(request: Request):
    response = JSONResponse({"success": True, "message": "Logged out successfully"})
    clear_admin_cookie(response, request.app.state.settings)
    return response


# ---------------------- Password reset ----------------------
@router.post("/api/auth/reset-password")
def forgot_password(data: ForgotPasswordRequest, request: Request, db: Database = Depends(get_db)):
    settings: Settings = request.app.state.settings
    with handle_errors("Failed to process password reset request"):
        body = {"success": True, "message": FORGOT_MESSAGE, "reset_url": ""}
        admin = db[COLLECTION].find_one({"username": data.username.strip()})
        if admin is None:
            return body
        token = secrets.token_hex(32)
        expires = now() + timedelta(minutes=settings.reset_token_expire_minutes)
        update_document(db, COLLECTION, admin["_id"], {"reset_token": token, "reset_expires": expires})
        reset_url = f"{settings.site_url.rstrip('/')}/reset-password/{token}"
        logger.info("Password reset link generated for %s: %s", admin["username"], reset_url)
        if settings.expose_reset_url:
            body["reset_url"] = reset_url
        return body


@router.put("/api/auth/reset-password")
def reset_password(data: ResetPasswordRequest, db: Database = Depends(get_db)):
    token = data.token.strip()
    if not token:
        raise HTTPException(status_code=400, detail="Reset token is required")
    with handle_errors("Failed to reset password"):
        admin = db[COLLECTION].find_one({"reset_token": token, "reset_expires": {"$gt": now()}})
        if admin is None:
            raise HTTPException(status_code=400, detail="Invalid or expired reset token")
        check_password_strength(data.new_password)
        update_document(db, COLLECTION, admin["_id"], {
            "password": get_password_hash(data.new_password),
            "reset_token": None,
            "reset_expires": None,
        })
        logger.info("Password reset for %s", admin["username"])
        return {"success": True, "message": "Password has been reset successfully"}


# ---------------------- Admin settings ----------------------
@router.get("/api/admin/settings", dependencies=[Depends(require_admin)])
def get_admin_settings(db: Database = Depends(get_db)):
    with handle_errors("Failed to fetch admin settings"):
        admin = db[COLLECTION].find_one({})
        if admin is None:
            raise HTTPException(status_code=404, detail="Admin not found")
        return public_admin(admin)


@router.put("/api/admin/settings")
def update_admin_settings(data: AdminSettingsUpdate, request: Request, db: Database = Depends(get_db)):
    settings: Settings = request.app.state.settings
    with handle_errors("Failed to update admin settings"):
        admin = db[COLLECTION].find_one({})
        if admin is None:
            raise HTTPException(status_code=404, detail="Admin not found")
        changes: Dict[str, Any] = {}
        if data.new_password:
            if not data.current_password:
                raise HTTPException(status_code=400, detail="Current password is required")
            if not verify_password(data.current_password, admin.get("password", "")):
                raise HTTPException(status_code=401, detail="Current password is incorrect")
            changes["password"] = get_password_hash(data.new_password)
        if data.username:
            changes["username"] = data.username
        if data.email:
            changes["email"] = data.email
        updated = update_document(db, COLLECTION, admin["_id"], changes, "Admin not found")
        response = JSONResponse({"message": "Admin settings updated successfully", "admin": public_admin(updated)})
        if updated["username"] != admin["username"]:
            issue_admin_session(response, updated, settings)
        return response


@router.post("/api/admin/settings", status_code=201)
def create_admin(data: AdminCreate, db: Database = Depends(get_db)):
    with handle_errors("Failed to create admin"):
        if db[COLLECTION].find_one({}, {"_id": 1}) is not None:
            raise HTTPException(status_code=400, detail="Admin already exists")
        doc = create_document(db, COLLECTION, Admin(
            username=data.username, email=data.email, password=get_password_hash(data.password)
        ))
        return {"message": "Admin created successfully", "admin": public_admin(doc)}
