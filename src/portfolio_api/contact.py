from __future__ import annotations

import logging

from portfolio_api.schemas import ContactSubmission

logger = logging.getLogger(__name__)

CONTACT_SUCCESS_MESSAGE = "Message received! Thank you for your submission."


class ContactNotifier:
    """Hands contact form submissions off for delivery.

    Submissions are only logged. Nothing is stored and no mail is sent.
    """

    def deliver(self, submission: ContactSubmission) -> str:
        logger.info(
            "Contact form submission from %s <%s>: %s",
            submission.name,
            submission.email,
            submission.subject,
            extra={"contact_email": submission.email, "contact_subject": submission.subject},
        )
        logger.debug(
            "Contact form message: %s",
            submission.message,
            extra={"contact_email": submission.email},
        )
        return CONTACT_SUCCESS_MESSAGE


def get_contact_notifier() -> ContactNotifier:
    return ContactNotifier()
