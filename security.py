from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

import config
from errors import Forbidden

password_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return password_ctx.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return password_ctx.verify(password, hashed)
    except ValueError:
        # unrecognised or empty hash
        return False


def create_token(subject: str = "admin", expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(hours=config.JWT_EXPIRES_HOURS)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Forbidden("Token expired")
    except jwt.InvalidTokenError:
        raise Forbidden("Invalid token")
