import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

from database import create_document, get_db
from schemas import AdminLogin, AdminUser
from utils import oid

logger = logging.getLogger(__name__)

# JWT settings
SECRET_KEY = os.getenv("JWT_SECRET", "super-secret-key-change")
ALGORITHM = "HS256"
SESSION_MAX_AGE = 60 * 60 * 8  # 8h
COOKIE_NAME = "admin_session"
SECURE_COOKIES = os.getenv("APP_ENV", "development") == "production"

# Use pbkdf2_sha256 to avoid bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/admin/login", auto_error=False)

router = APIRouter(prefix="/api/admin", tags=["auth"])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(seconds=SESSION_MAX_AGE))
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_token(token: str) -> Optional[dict]:
    """Signature and expiry check. Returns the session claims or None."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not all(isinstance(payload.get(k), str) for k in ("id", "email", "role")):
        return None
    return {"id": payload["id"], "email": payload["email"], "role": payload["role"]}


def authenticate_admin(db: Database, email: str, password: str):
    user = db["admin_user"].find_one({"email": email.lower()})
    if not user or not verify_password(password, user.get("password_hash", "")):
        return None
    return {"id": str(user["_id"]), "email": user["email"], "role": user.get("role", "admin")}


async def get_current_admin(
    bearer: Optional[str] = Depends(oauth2_scheme),
    session: Optional[str] = Cookie(None, alias=COOKIE_NAME),
):
    token = session or bearer
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    claims = decode_token(token)
    if claims is None:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    return claims


def ensure_default_admin(db: Database):
    """Create the admin account from ADMIN_DEFAULT_EMAIL/PASSWORD if missing."""
    email = os.getenv("ADMIN_DEFAULT_EMAIL")
    password = os.getenv("ADMIN_DEFAULT_PASSWORD")
    if not email or not password:
        return
    if db["admin_user"].find_one({"email": email.lower()}):
        return
    admin = AdminUser(email=email.lower(), password_hash=hash_password(password))
    create_document(db, "admin_user", admin)
    logger.info("Default admin created for %s", email)


@router.post("/login")
def admin_login(payload: AdminLogin, response: Response, db: Database = Depends(get_db)):
    user = authenticate_admin(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": user["email"], **user})
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=SECURE_COOKIES,
        samesite="lax",
        path="/",
    )
    logger.info("Admin %s logged in", user["email"])
    return {"success": True, "data": user, "access_token": token, "token_type": "bearer"}


@router.post("/logout")
def admin_logout(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"success": True, "message": "Logged out"}


@router.get("/me")
def admin_me(admin: dict = Depends(get_current_admin), db: Database = Depends(get_db)):
    doc = db["admin_user"].find_one({"_id": oid(admin["id"])}, {"password_hash": 0})
    if not doc:
        raise HTTPException(status_code=404, detail="Admin not found")
    return {
        "success": True,
        "data": {"id": str(doc["_id"]), "email": doc["email"], "role": doc.get("role"), "name": doc.get("name")},
    }
