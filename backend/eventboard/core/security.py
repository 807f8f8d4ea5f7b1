# eventboard/core/security.py
import bcrypt
from jose import jwt, ExpiredSignatureError, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from eventboard.core.config import settings


class TokenExpiredError(ValueError):
    pass


class InvalidTokenError(ValueError):
    pass


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its hash"""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire, "type": "access"})

    secret_key = settings.security.JWT_SECRET_KEY.get_secret_value()

    return jwt.encode(
        to_encode,
        secret_key,
        algorithm=settings.security.JWT_ALGORITHM
    )

def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT.

    Raises TokenExpiredError for an expired token and InvalidTokenError
    for anything malformed or signed with another key.
    """
    try:
        secret_key = settings.security.JWT_SECRET_KEY.get_secret_value()

        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[settings.security.JWT_ALGORITHM]
        )
        return payload
    except ExpiredSignatureError:
        raise TokenExpiredError("Token expired")
    except JWTError:
        raise InvalidTokenError("Invalid token")
