"""
Password hashing and access token helpers.
"""
import logging
from base64 import b64encode
from datetime import datetime, timedelta, timezone
from typing import Optional

from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import bcrypt, bcrypt_check
from jose import JWTError, jwt

from .config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
SECRET_KEY = settings.secret_key
ALGORITHM = settings.algorithm


def _prehash(password: str) -> bytes:
    # bcrypt only reads 72 bytes and rejects NUL bytes
    return b64encode(SHA256.new(password.encode("utf-8")).digest())


def get_password_hash(password: str) -> str:
    return bcrypt(_prehash(password), settings.password_hash_rounds).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        bcrypt_check(_prehash(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False
    return True


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the token subject (user id), or None for an invalid or expired token."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.warning("Rejected access token: %s", exc)
        return None
    return payload.get("sub")
