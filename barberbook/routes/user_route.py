from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from typing import Annotated
from barberbook.services.user_crud import user_crud
from barberbook.schemas.user_schema import (
    LoginResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RefreshTokenRequest,
    RefreshTokenResponse,
    UserCreate,
    UserLogin,
    UserOut,
    UserUpdate,
)
from barberbook.database import get_db
from barberbook.security.auth import oauth2_scheme, get_current_user, get_current_active_user
from barberbook.utils.user_app_service import user_app_service
from barberbook.models.user_model import User
from barberbook.logger import get_logger


user_router = APIRouter()
logger = get_logger(__name__)


def _sign_in(db: Session, credentials: UserLogin) -> LoginResponse:
    try:
        return user_app_service.login_user(db, credentials)
    except HTTPException:
        logger.warning(f"Sign-in refused for {credentials.email}")
        raise
    except Exception as e:
        logger.error(f"Sign-in failed for {credentials.email}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not sign you in, please try again"
        )


# SESSION

@user_router.post("/auth/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def sign_up(new_user: UserCreate, db: Session = Depends(get_db)):
    """Create a customer or barber account; the role cannot be changed later"""
    logger.info(f"Sign-up as {new_user.role.value}: {new_user.email}")
    return UserOut.model_validate(user_crud.create_user(db, new_user))


@user_router.post("/auth/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def sign_in(credentials: UserLogin, db: Session = Depends(get_db)):
    logger.info(f"Sign-in attempt: {credentials.email}")
    return _sign_in(db, credentials)


@user_router.post("/token", response_model=LoginResponse)
def sign_in_with_form(
        form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
        db: Session = Depends(get_db),
):
    """OAuth2 password flow, the username field carries the email"""
    logger.info(f"Token requested for: {form_data.username}")
    return _sign_in(db, UserLogin(email=form_data.username, password=form_data.password))


@user_router.post("/auth/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def sign_out(
        session_tokens: RefreshTokenRequest,
        current_user: User = Depends(get_current_user),
        access_token: str = Depends(oauth2_scheme),
        db: Session = Depends(get_db)
):
    return user_app_service.logout_user(db, current_user, access_token, session_tokens.refresh_token)


@user_router.post("/auth/refresh", response_model=RefreshTokenResponse, status_code=status.HTTP_200_OK)
def refresh_session(session_tokens: RefreshTokenRequest, db: Session = Depends(get_db)):
    return user_app_service.refresh_access_token(db, session_tokens)


@user_router.post("/auth/password-reset", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def request_password_reset(reset_request: PasswordResetRequest, db: Session = Depends(get_db)):
    logger.info(f"Password reset requested for: {reset_request.email}")
    return user_app_service.request_password_reset(db, reset_request.email)


@user_router.post("/auth/password-reset/confirm", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def confirm_password_reset(reset: PasswordResetConfirm, db: Session = Depends(get_db)):
    return user_app_service.confirm_password_reset(db, reset)


# ACCOUNT

@user_router.get("/me", response_model=UserOut, status_code=status.HTTP_200_OK)
def read_account(current_user: User = Depends(get_current_active_user)):
    return UserOut.model_validate(current_user)


@user_router.patch("/me", response_model=UserOut, status_code=status.HTTP_200_OK)
def update_account(
        changes: UserUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Name, phone and password can change; email and role stay fixed"""
    try:
        logger.info(f"Account update for: {current_user.email}")
        return UserOut.model_validate(user_crud.update_user(db, current_user, changes))
    except Exception as e:
        db.rollback()
        logger.error(f"Account update failed for {current_user.email}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while updating profile"
        )
