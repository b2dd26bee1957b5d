import resend

from barberbook import config
from barberbook.logger import get_logger

logger = get_logger(__name__)


class EmailDeliveryError(Exception):
    pass


def send_email(to: str, subject: str, html_content: str) -> bool:
    """Send an email through Resend.

    Returns False when no API key is configured so callers can decide
    what to tell the user; delivery failures raise EmailDeliveryError.
    """
    if not config.RESEND_API_KEY:
        logger.warning(f"No email API key configured, email to {to} not sent: {subject}")
        return False

    resend.api_key = config.RESEND_API_KEY
    email_data = {
        "from": config.EMAIL_FROM_ADDRESS,
        "to": [to],
        "subject": subject,
        "html": html_content,
    }
    try:
        response = resend.Emails.send(email_data)
    except Exception as e:
        logger.error(f"Email send to {to} failed: {str(e)}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e

    logger.info(f"Email sent to {to}: {subject} ({response})")
    return True


def send_password_reset_email(to: str, reset_token: str) -> bool:
    reset_link = f"{config.FRONTEND_URL.rstrip('/')}/reset-password?token={reset_token}"
    html_content = (
        "<p>We received a request to reset your BarberBook password.</p>"
        f'<p><a href="{reset_link}">Choose a new password</a></p>'
        f"<p>The link expires in {config.RESET_TOKEN_EXPIRE_MINUTES} minutes. "
        "If you did not ask for this, you can ignore this email.</p>"
    )
    return send_email(to, "Reset your BarberBook password", html_content)
