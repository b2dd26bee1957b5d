from typing import Optional
from sqlalchemy.orm import Session
from barberbook.models.user_model import User
from barberbook.schemas.user_schema import (
    UserOut,
    UserLogin,
    LoginResponse,
    MessageResponse,
    PasswordResetConfirm,
    RefreshTokenRequest,
    RefreshTokenResponse,
)
from fastapi import HTTPException, status
from barberbook.security.auth import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    create_reset_token,
    get_password_hash,
    verify_refresh_token,
    verify_reset_token,
)
from barberbook.utils.mailer import EmailDeliveryError, send_password_reset_email
from barberbook.utils.token_blacklist import token_blacklist_service
from barberbook.logger import get_logger

logger = get_logger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists for this email, a password reset link has been sent."


class UserService:
    @staticmethod
    def login_user(db: Session, user_login: UserLogin) -> LoginResponse:
        user = authenticate_user(db, user_login.email, user_login.password)

        # A signed-out session becomes active again on the next sign-in
        if user.status != "active":
            user.status = "active"
            db.commit()
            db.refresh(user)
            logger.info(f"User status reactivated for: {user_login.email}")

        access_token, _ = create_access_token(data={"sub": str(user.id)})
        refresh_token, _ = create_refresh_token(data={"sub": str(user.id)})

        logger.info(f"User logged in: {user_login.email}")
        return LoginResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            user=UserOut.model_validate(user),
        )

    @staticmethod
    def logout_user(
        db: Session,
        user: User,
        access_token: str,
        refresh_token: Optional[str] = None,
    ) -> MessageResponse:
        """Mark the session inactive and blacklist its tokens"""
        try:
            user.status = "inactive"
            token_blacklist_service.revoke(db, access_token)
            token_blacklist_service.revoke(db, refresh_token)
            db.commit()
            db.refresh(user)

            logger.info(f"User logged out: {user.email}")
            return MessageResponse(message="Successfully logged out")

        except Exception as e:
            logger.error(f"Error during logout for user {user.email}: {str(e)}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred during logout",
            )

    @staticmethod
    def refresh_access_token(
        db: Session, refresh_request: RefreshTokenRequest
    ) -> RefreshTokenResponse:
        """Issue a new token pair; the refresh token used is revoked"""
        user = verify_refresh_token(refresh_request.refresh_token, db)

        try:
            token_blacklist_service.revoke(db, refresh_request.refresh_token)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error revoking refresh token for {user.email}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while refreshing token",
            )

        access_token, _ = create_access_token(data={"sub": str(user.id)})
        refresh_token, _ = create_refresh_token(data={"sub": str(user.id)})

        logger.info(f"Tokens refreshed for user: {user.email}")
        return RefreshTokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
        )

    @staticmethod
    def request_password_reset(db: Session, email: str) -> MessageResponse:
        """Email a reset link; the answer is the same whether or not the account exists"""
        user = db.query(User).filter(User.email == email, User.is_active == True).first()
        if not user:
            logger.info(f"Password reset requested for unknown email: {email}")
            return MessageResponse(message=RESET_REQUESTED_MESSAGE)

        reset_token, _ = create_reset_token(user)
        try:
            sent = send_password_reset_email(user.email, reset_token)
        except EmailDeliveryError as e:
            logger.error(f"Could not send password reset email to {email}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not send the password reset email. Please try again later.",
            )

        if sent:
            logger.info(f"Password reset email sent to: {email}")
        return MessageResponse(message=RESET_REQUESTED_MESSAGE)

    @staticmethod
    def confirm_password_reset(db: Session, reset: PasswordResetConfirm) -> MessageResponse:
        user = verify_reset_token(reset.token, db)

        try:
            user.password_hash = get_password_hash(reset.new_password)
            token_blacklist_service.revoke(db, reset.token)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error resetting password for {user.email}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while resetting password",
            )

        logger.info(f"Password reset for user: {user.email}")
        return MessageResponse(message="Your password has been reset. You can now sign in.")


user_app_service = UserService()
