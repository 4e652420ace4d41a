# auth_service/security.py
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .database import get_db
from .errors import forbidden, unauthorized
from .models import User

# Password Hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password):
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id, secret_key, expires_delta: timedelta, algorithm="HS256"):
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token, secret_key, algorithm="HS256"):
    """Return the user id carried by ``token`` or raise ``JWTError``."""
    payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    subject = payload.get("sub")
    if subject is None:
        raise JWTError("Token has no subject")
    try:
        return int(subject)
    except ValueError:
        raise JWTError("Token subject is not a user id")


def issue_token(request: Request, user):
    config = request.app.state.config
    return create_access_token(
        user.id,
        config.AUTH_SECRET_KEY,
        timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
        algorithm=config.ALGORITHM,
    )


# --- Dependencies ---
def get_current_user(
    request: Request,
    authorization: str = Header(None),
    db: Session = Depends(get_db),
):
    """Re-verify the bearer token and re-load the user on every request."""
    if not authorization or not authorization.startswith("Bearer "):
        raise unauthorized("Not authorized, no token")

    config = request.app.state.config
    token = authorization.split(" ", 1)[1].strip()
    try:
        user_id = decode_access_token(token, config.AUTH_SECRET_KEY, config.ALGORITHM)
    except JWTError:
        raise unauthorized("Not authorized, token failed")

    user = db.get(User, user_id)
    if user is None:
        raise unauthorized("Not authorized, user not found")
    if not user.is_active:
        raise forbidden("Your account has been deactivated. Please contact support.")
    return user


def verified_user_required(user: User = Depends(get_current_user)):
    if not user.is_verified:
        raise forbidden("Please verify your email first", isVerified=False)
    return user


def admin_required(user: User = Depends(get_current_user)):
    if user.role != "admin":
        raise forbidden("Access denied. Admin privileges required.")
    return user
