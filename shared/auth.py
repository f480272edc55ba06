# shared/auth.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from shared.config import JWT_SECRET
from services.user_management.models.users import UserRole

logger = logging.getLogger(__name__)

SECRET_KEY = JWT_SECRET
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7

if SECRET_KEY == "secret":
    logger.warning("JWT_SECRET is not set, falling back to the development secret")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


class InvalidToken(Exception):
    pass


def verify_password(plain_password, hashed_password):
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(user_id: str, role: str, expires_delta: timedelta = None):
    expire = datetime.utcnow() + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {"sub": str(user_id), "role": str(role), "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry and return the identity carried by the token.
    Raises InvalidToken for anything that is not a well-formed, live token.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise InvalidToken("Token is missing required claims")

    return {"user_id": user_id, "role": role}


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


def get_current_user(token: str = Depends(oauth2_scheme)):
    try:
        return decode_token(token)
    except InvalidToken as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme)):
    if not token:
        return None
    try:
        return decode_token(token)
    except InvalidToken:
        return None


def require_role(*roles: UserRole):
    """Build a dependency that only lets identities with one of `roles` through."""
    allowed = {UserRole(role).value for role in roles}

    def checker(current_user: dict = Depends(get_current_user)):
        if current_user["role"] not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required" if allowed == {UserRole.ADMIN.value} else "Insufficient privileges",
            )
        return current_user

    return checker


get_current_admin = require_role(UserRole.ADMIN)


def is_owner_or_admin(current_user: dict, owner_id: str) -> bool:
    return current_user["user_id"] == owner_id or current_user["role"] == UserRole.ADMIN.value
