import logging
from html import escape

import sendgrid
from sendgrid.helpers.mail import Mail

import config
import secretmanager
from domain.contact import ContactMessage

logger = logging.getLogger('uvicorn.error')


def build_contact_email(message: ContactMessage) -> Mail:
    return Mail(
        from_email=config.settings.contact_from_email,
        to_emails=config.settings.contact_to_email,
        subject=f'New portfolio message from {message.name}',
        html_content=(
            f'<strong>{escape(message.name)}</strong> ({escape(message.email)}) wrote:'
            f'<p>{escape(message.message)}</p>'
        ),
    )


def send_contact_notification(message: ContactMessage) -> bool:
    """Emails the site owner about a new contact message. Failures are logged, never raised."""
    if not config.settings.contact_notifications:
        return False
    try:
        sg = sendgrid.SendGridAPIClient(secretmanager.get_secret(config.settings.sendgrid_secret))
        response = sg.send(build_contact_email(message))
        logger.info(f"Contact notification sent, status code: {response.status_code}")
        return True
    except Exception as e:
        logger.error(f"Error sending contact notification for {message.email}: {e}")
        return False
