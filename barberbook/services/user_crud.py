from fastapi import HTTPException, status
from barberbook.schemas.user_schema import UserCreate, UserUpdate
from barberbook.models.user_model import User
from sqlalchemy.orm import Session
from barberbook.security.auth import get_password_hash
from barberbook.logger import get_logger

logger = get_logger(__name__)


class UserCRUD:
    @staticmethod
    def get_user_by_email(db: Session, email: str):
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def create_user(db: Session, user: UserCreate) -> User:
        existing_user = UserCRUD.get_user_by_email(db, user.email)
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An account with this email already exists"
            )

        try:
            db_user = User(
                name=user.name,
                email=user.email,
                phone=user.phone,
                password_hash=get_password_hash(user.password),
                role=user.role.value,
                status="active",
                is_active=True
            )
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
            logger.info(f"User registered: {db_user.email} as {db_user.role}")
            return db_user

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating user {user.email}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while creating account"
            )

    @staticmethod
    def update_user(db: Session, db_user: User, user_update: UserUpdate) -> User:
        # role and email are not part of UserUpdate, so they cannot change here
        for key, value in user_update.model_dump(exclude_unset=True).items():
            if value is not None:
                if key == "password":
                    setattr(db_user, "password_hash", get_password_hash(value))
                else:
                    setattr(db_user, key, value)

        db.commit()
        db.refresh(db_user)
        logger.info(f"User updated: {db_user.email}")
        return db_user


user_crud = UserCRUD()
