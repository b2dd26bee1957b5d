from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session
from barberbook.models.token_blacklist import TokenBlacklist
from jose import jwt
from barberbook.logger import get_logger

logger = get_logger(__name__)


class TokenBlacklistService:
    @staticmethod
    def revoke(db: Session, token: Optional[str]) -> bool:
        """Blacklist a token until it would have expired anyway.

        The token is only read, not verified: a token being revoked may
        already be expired or otherwise unusable. Does not commit.
        """
        if not token:
            return False
        try:
            payload = jwt.get_unverified_claims(token)
        except jwt.JWTError:
            logger.warning("Malformed token cannot be blacklisted")
            return False

        jti = payload.get("jti")
        exp = payload.get("exp")
        if not jti or exp is None:
            logger.warning("Token without JTI or expiry cannot be blacklisted")
            return False

        if db.query(TokenBlacklist).filter(TokenBlacklist.jti == jti).first():
            logger.info(f"Token with JTI {jti} already blacklisted")
            return False

        db.add(TokenBlacklist(
            jti=jti,
            token=token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        ))
        logger.info(f"Token with JTI {jti} blacklisted")
        return True

    @staticmethod
    def is_token_blacklisted(db: Session, jti: str) -> bool:
        """Check if a token is blacklisted"""
        blacklisted_token = db.query(TokenBlacklist).filter(
            TokenBlacklist.jti == jti,
            TokenBlacklist.expires_at > datetime.now(timezone.utc)
        ).first()

        return blacklisted_token is not None

    @staticmethod
    def cleanup_expired_tokens(db: Session) -> int:
        """Remove expired tokens from blacklist to keep the table clean"""
        try:
            expired_count = db.query(TokenBlacklist).filter(
                TokenBlacklist.expires_at <= datetime.now(timezone.utc)
            ).delete()
            db.commit()
        except Exception as e:
            logger.error(f"Error cleaning up expired tokens: {str(e)}")
            db.rollback()
            raise

        if expired_count > 0:
            logger.info(f"Cleaned up {expired_count} expired tokens from blacklist")
        return expired_count


token_blacklist_service = TokenBlacklistService()
