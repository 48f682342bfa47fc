import logging
import time
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import config
from database import db, now_iso
from errors import Unauthorized, ValidationError
from repository import public_profile
from security import create_token, decode_token, hash_password, verify_password

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def login(password: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """Check the admin password and issue a bearer token.

    A wrong password is answered only after ``LOGIN_FAILURE_DELAY`` seconds.
    """
    if not password:
        raise ValidationError("Password is required")
    user = db.read()["user"]
    if not verify_password(password, user.get("password", "")):
        logger.warning("Failed login attempt")
        time.sleep(config.LOGIN_FAILURE_DELAY)
        raise Unauthorized("Invalid password")
    return create_token(), public_profile(user)


def change_password(current_password: Optional[str], new_password: Optional[str]) -> None:
    if not current_password or not new_password:
        raise ValidationError("All password fields are required")
    with db.transaction() as data:
        user = data["user"]
        if not verify_password(current_password, user.get("password", "")):
            raise Unauthorized("Current password is incorrect")
        if len(new_password) < config.PASSWORD_MIN_LENGTH:
            raise ValidationError(f"New password must be at least {config.PASSWORD_MIN_LENGTH} characters")
        user["password"] = hash_password(new_password)
        user["lastPasswordChange"] = now_iso()
    logger.info("Admin password changed")


def require_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> dict:
    if credentials is None:
        raise Unauthorized("Access token required")
    return decode_token(credentials.credentials)
