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
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from django.conf import settings as conf_settings
from django.db import transaction
from django.utils import timezone

from accreditation.models.draft import Draft
from accreditation.utils.core.exceptions import DraftNotFoundError
from accreditation.utils.registration import APPLICANT_FIELDS

if TYPE_CHECKING:
    from datetime import datetime

    from accreditation.models.event import Event
    from accreditation.models.registration import Participant
    from accreditation.models.tenant import Tenant

logger = logging.getLogger(__name__)

DRAFT_TTL_HOURS = 24


def get_draft_ttl() -> timedelta:
    return timedelta(hours=getattr(conf_settings, "DRAFT_TTL_HOURS", DRAFT_TTL_HOURS))


def start_draft(user: Any, tenant: Tenant, event: Event, participant: Participant | None = None) -> Draft:
    """Open a new registration draft for the user, discarding any previous one.

    Args:
        user: User registering
        tenant: Tenant owning the event
        event: Event to register to
        participant: Existing participant when the draft edits a submitted request

    Returns:
        Draft: The new draft, expiring after DRAFT_TTL_HOURS

    """
    with transaction.atomic():
        Draft.objects.filter(user=user).delete()
        draft = Draft(
            user=user,
            tenant=tenant,
            event=event,
            participant=participant,
            expires_at=timezone.now() + get_draft_ttl(),
        )
        if participant:
            draft.participant_type_id = participant.participant_type_id
            draft.invitation_id = participant.invitation_id
            for field_name in (*APPLICANT_FIELDS, "email", "organization"):
                setattr(draft, field_name, getattr(participant, field_name))
        draft.save()
        if participant:
            draft.meetings.set(participant.meetings.all())

    logger.debug("Started draft %s for user %s", draft.pk, user.pk)
    return draft


def get_active_draft(user: Any) -> Draft:
    """Return the unexpired draft of the user.

    Raises:
        DraftNotFoundError: If the user has no draft, or it has expired

    """
    draft = Draft.objects.filter(user=user).select_related("event", "tenant", "participant_type", "invitation").first()
    if draft is None or draft.is_expired():
        msg = f"No active draft for user {getattr(user, 'pk', None)}"
        raise DraftNotFoundError(msg)
    return draft


def update_draft(draft: Draft, **fields: Any) -> Draft:
    """Set the given fields on the draft and save them.

    Many to many values (meetings) are replaced as a whole.
    """
    meetings = fields.pop("meetings", None)
    for field_name, value in fields.items():
        setattr(draft, field_name, value)
    draft.save()
    if meetings is not None:
        draft.meetings.set(meetings)
    return draft


def cancel_draft(user: Any) -> bool:
    """Drop the draft of the user, if any.

    Returns:
        bool: True if a draft was deleted

    """
    deleted, _details = Draft.objects.filter(user=user).delete()
    if deleted:
        logger.debug("Cancelled draft of user %s", user.pk)
    return bool(deleted)


def expire_drafts(now: datetime | None = None) -> int:
    """Delete every draft whose expiry is past.

    Args:
        now: Reference time, defaults to the current time

    Returns:
        int: Number of drafts deleted

    """
    now = now or timezone.now()
    expired = Draft.objects.filter(expires_at__lte=now)
    count = expired.count()
    if count:
        expired.delete()
        logger.info("Expired %s registration drafts", count)
    return count
