from jose import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4
from passlib.context import CryptContext
from fastapi import HTTPException, Depends, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from barberbook.config import (
    SECRET_KEY,
    ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
    RESET_TOKEN_EXPIRE_MINUTES,
)
from barberbook.models.user_model import User
from barberbook.database import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/token")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def authenticate_user(db: Session, email: str, password: str):
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive.",
        )
    return user


def _create_token(data: dict, token_type: str, expires_delta: timedelta):
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + expires_delta
    to_encode.update({
        "exp": expire,
        "jti": str(uuid4()),
        "iat": now,
        "type": token_type,
    })
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt, expire


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    return _create_token(
        data, "access", expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None):
    return _create_token(
        data, "refresh", expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    )


def create_reset_token(user: User):
    # Bound to the current password hash so the link stops working once used
    return _create_token(
        {"sub": str(user.id), "pwd": user.password_hash[-12:]},
        "reset",
        timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES),
    )


def _decode_token(token: str, expected_type: str, db: Session, detail: str) -> dict:
    credentials_exception = HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.JWTError:
        raise credentials_exception

    user_id: str = payload.get("sub")
    jti: str = payload.get("jti")
    token_type: str = payload.get("type")
    if user_id is None or jti is None or token_type != expected_type:
        raise credentials_exception

    # Check if token is blacklisted
    from barberbook.utils.token_blacklist import token_blacklist_service
    if token_blacklist_service.is_token_blacklisted(db, jti):
        raise HTTPException(
            status_code=401,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def verify_refresh_token(token: str, db: Session) -> User:
    """Verify refresh token and return user"""
    payload = _decode_token(token, "refresh", db, "Invalid refresh token")
    user = db.query(User).filter(User.id == payload["sub"], User.is_active == True).first()
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def verify_reset_token(token: str, db: Session) -> User:
    """Verify password reset token and return user"""
    payload = _decode_token(token, "reset", db, "Invalid or expired reset link")
    user = db.query(User).filter(User.id == payload["sub"], User.is_active == True).first()
    if user is None or user.password_hash[-12:] != payload.get("pwd"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset link",
        )
    return user


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    payload = _decode_token(token, "access", db, "Could not validate credentials")

    user = db.query(User).filter(User.id == payload["sub"], User.is_active == True).first()
    if user is None:
        # Token is valid but the account record is gone
        raise HTTPException(
            status_code=401,
            detail="Account data not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)):
    """Get current user and ensure they are active (not logged out)"""
    if current_user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is currently logged out"
        )
    return current_user


def get_current_customer(current_user: User = Depends(get_current_active_user)):
    if current_user.role != "customer":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer account required"
        )
    return current_user


def get_current_barber(current_user: User = Depends(get_current_active_user)):
    if current_user.role != "barber":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Barber account required"
        )
    return current_user
