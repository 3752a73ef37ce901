# Accreditation - event accreditation and registration
# Copyright (C) 2025 Scanagatta Mauro
#
# This file is part of Accreditation and is dual-licensed:
#
# 1. Under the terms of the GNU Affero General Public License (AGPL) version 3,
#    as published by the Free Software Foundation. You may use, modify, and
#    distribute this file under those terms.
#
# 2. Under a commercial license, allowing use in closed-source or proprietary
#    environments without the obligations of the AGPL.
#
# If you have obtained this file under the AGPL, and you make it available over
# a network, you must also make the complete source code available under the same license.
#
# For more information or to purchase a commercial license, contact:
# commercial@larpmanager.com
#
# SPDX-License-Identifier: AGPL-3.0-or-later OR Proprietary

from __future__ import annotations

import logging
import re
import traceback
from functools import wraps
from typing import TYPE_CHECKING, Any

from background_task import background
from django.conf import settings as conf_settings
from django.core.mail import EmailMultiAlternatives, send_mail

from accreditation.models.tenant import Tenant

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

INTERNAL_KWARGS = {"schedule", "repeat", "repeat_until", "remove_existing_tasks"}

DEFAULT_SENDER_NAME = "Accreditation"


def background_auto(schedule: Any = 0, **background_kwargs: Any) -> Any:
    """Conditionally run functions as background tasks.

    Creates a decorator that can run functions either synchronously
    (if AUTO_BACKGROUND_TASKS is True) or as background tasks.

    Args:
        schedule (int): Seconds to delay before execution
        **background_kwargs: Additional arguments for background task

    Returns:
        function: Decorator function

    """

    def decorator(original_function: Callable[..., Any]) -> Callable[..., Any]:
        background_task = background(schedule=schedule, **background_kwargs)(original_function)

        @wraps(original_function)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """Execute function directly or schedule as background task based on settings."""
            if getattr(conf_settings, "AUTO_BACKGROUND_TASKS", False):
                # Filter out internal kwargs that shouldn't be passed to the function
                filtered_kwargs = {key: value for key, value in kwargs.items() if key not in INTERNAL_KWARGS}
                return original_function(*args, **filtered_kwargs)
            return background_task(*args, **kwargs)

        # Attach task references to wrapper for external access
        wrapper.task = background_task
        wrapper.task_function = original_function
        return wrapper

    return decorator


def mail_error(subject: Any, email_body: Any, exception: Any = None) -> None:
    """Log an email sending failure and notify administrators.

    Args:
        subject (str): Email subject that failed
        email_body (str): Email body that failed
        exception (Exception, optional): Exception that caused the failure

    """
    logger.error("Mail error: %s", exception)
    logger.error("Subject: %s", subject)
    logger.debug("Body: %s", email_body)
    if exception:
        error_notification_body = f"{traceback.format_exc()}\n\n{subject}\n\n{email_body}"
    else:
        error_notification_body = f"{subject}\n\n{email_body}"
    admin_emails = [admin_email for _admin_name, admin_email in conf_settings.ADMINS]
    if admin_emails:
        send_mail("[Accreditation] Mail error", error_notification_body, None, admin_emails, fail_silently=True)


def clean_sender(sender_name: Any) -> Any:
    """Clean sender name for email headers by removing special characters.

    Args:
        sender_name (str): Original sender name

    Returns:
        str: Sanitized sender name safe for email headers

    """
    sender_name = sender_name.replace(":", " ")
    sender_name = sender_name.split(",")[0]
    sender_name = re.sub(r"[^a-zA-Z0-9\s\-\']", "", sender_name)
    return re.sub(r"\s+", " ", sender_name).strip()


def _build_email_message(
    subject: str, plain_text: str, html: str, to_email: str, tenant_id: int | None
) -> EmailMultiAlternatives:
    """Build the multipart message, using the tenant as sender when it has an address."""
    sender_name = DEFAULT_SENDER_NAME
    sender_email = conf_settings.DEFAULT_FROM_EMAIL
    if tenant_id:
        tenant = Tenant.objects.filter(pk=tenant_id).first()
        if tenant:
            sender_name = tenant.name
            if tenant.email:
                sender_email = tenant.email

    message = EmailMultiAlternatives(
        subject,
        plain_text,
        f"{clean_sender(sender_name)} <{sender_email}>",
        [to_email],
    )
    if html:
        message.attach_alternative(html, "text/html")
    return message


@background_auto(queue="mail")
def send_notification_bkg(
    to_email: str,
    subject: str,
    plain_text: str,
    html: str = "",
    tenant_id: int | None = None,
) -> None:
    """Background task delivering one notification email.

    Raises:
        Exception: Re-raises email sending exceptions after logging error details

    """
    try:
        message = _build_email_message(subject, plain_text, html, to_email, tenant_id)
        message.send()
        logger.info("Sent '%s' to %s", subject, to_email)
    except Exception as email_sending_exception:
        mail_error(subject, plain_text, email_sending_exception)
        raise


def send_notification(
    to_email: str,
    subject: str,
    plain_text: str,
    html: str = "",
    tenant_id: int | None = None,
    schedule: int = 0,
) -> None:
    """Queue a notification email for delivery.

    Args:
        to_email: Recipient address
        subject: Email subject line
        plain_text: Plain text body
        html: Optional HTML alternative body
        tenant_id: Tenant whose name and address are used as sender
        schedule: Delay in seconds before sending

    """
    if not to_email:
        logger.warning("Skipping notification '%s' without recipient", subject)
        return

    send_notification_bkg(to_email, subject.replace("  ", " "), plain_text, html, tenant_id, schedule=schedule)
