import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail

from .exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


def send_password_reset_email(user, uid, token):
    reset_link = f"{settings.FRONTEND_RESET_URL}?uid={uid}&token={token}"
    hours = settings.PASSWORD_RESET_TIMEOUT // 3600
    message = (
        f"Hello {user.first_name or user.username},\n\n"
        f"We received a request to reset your password. Use the link below to choose a new one:\n\n"
        f"{reset_link}\n\n"
        f"The link expires in {hours} hour(s). If you did not request this, ignore this email.\n"
    )
    try:
        send_mail(
            subject='Password reset',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            fail_silently=False,
        )
    except (SMTPException, OSError) as e:
        logger.error(f"Failed to send password reset email to user {user.pk}: {e}", exc_info=True)
        raise EmailDeliveryError()
