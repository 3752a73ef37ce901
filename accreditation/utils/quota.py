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


"""Registration quota evaluation.

Quotas come from two places. An invitation may carry a maximum quota, capping
the participants registered through it; its restriction may group constraints,
each capping the participants of one type for the invitation's organization.

When no constraint covers a participant type the type is unrestricted, unless
QUOTA_MISSING_CONSTRAINT_UNLIMITED is turned off. Nothing here writes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.conf import settings as conf_settings

from accreditation.models.registration import Constraint, Invitation, Participant, RequestFor
from accreditation.models.tenant import ALL_PARTICIPANT_TYPES, CLOSED_SESSION, MeetingType, ParticipantType
from accreditation.utils.permission import is_focal

if TYPE_CHECKING:
    from accreditation.models.event import Event
    from accreditation.models.tenant import Tenant

logger = logging.getLogger(__name__)

# Available slots of a participant type without any constraint
NO_LIMIT = float("inf")


def get_closed_session_meeting(tenant_id: int) -> MeetingType | None:
    return MeetingType.objects.filter(tenant_id=tenant_id, name=CLOSED_SESSION).first()


def available_slots(invitation: Invitation, constraint: Constraint, organization: str | None = None) -> int:
    """Compute the remaining slots of a constraint for an organization.

    The count covers every participant of the invitation's event and tenant
    with the given organization: those of the constraint's type, or, for
    the closed session constraint, those asking for a closed session meeting.

    Args:
        invitation: Invitation giving tenant, event and default organization
        constraint: Constraint providing the quota
        organization: Organization to count, defaults to the invitation's

    Returns:
        int: Quota minus current count, negative when over quota

    """
    if organization is None:
        organization = invitation.organization

    participants = Participant.objects.filter(
        tenant_id=invitation.tenant_id,
        event_id=invitation.event_id,
        organization=organization,
    )

    if constraint.is_closed_session():
        meeting = get_closed_session_meeting(invitation.tenant_id)
        count = participants.filter(meetings=meeting).distinct().count() if meeting else 0
    else:
        count = participants.filter(participant_type_id=constraint.participant_type_id).count()

    return constraint.quota - count


def get_type_constraint(
    invitation: Invitation,
    participant_type: ParticipantType,
    *,
    lock: bool = False,
) -> Constraint | None:
    """Find the constraint capping a participant type within the invitation's restriction.

    With lock set the constraint row is selected for update, serializing the
    registrations counted against it until the current transaction ends.
    """
    if not invitation.restriction_id:
        return None

    queryset = Constraint.objects.filter(restriction_id=invitation.restriction_id, participant_type=participant_type)
    if lock:
        queryset = queryset.select_for_update()
    return queryset.exclude(name=CLOSED_SESSION).order_by("id").first()


def slots_for_type(invitation: Invitation, participant_type: ParticipantType, *, lock: bool = False) -> int | float:
    """Return the remaining slots of a participant type for the invitation.

    Returns:
        The available slots, or NO_LIMIT for a type without constraint when
        missing constraints are unlimited (0 otherwise)

    """
    constraint = get_type_constraint(invitation, participant_type, lock=lock)
    if constraint is None:
        if getattr(conf_settings, "QUOTA_MISSING_CONSTRAINT_UNLIMITED", True):
            return NO_LIMIT
        return 0

    return available_slots(invitation, constraint)


def count_invitation_participants(invitation: Invitation) -> int:
    return Participant.objects.filter(invitation=invitation, organization=invitation.organization).count()


def invitation_quota_reached(invitation: Invitation) -> bool:
    """Check if the invitation's maximum quota is used up.

    Invitations without a maximum quota, or with a quota of 0, are never
    exhausted.
    """
    if not invitation.maximum_quota:
        return False

    return count_invitation_participants(invitation) >= invitation.maximum_quota


def allowed_participant_types(
    user: Any,
    invitation: Invitation | None,
    request_for: str,
    tenant: Tenant,
) -> list[ParticipantType]:
    """List the participant types a user may choose for a new registration.

    People registering themselves, and users outside the focal role, may pick
    any concrete type. A focal user registering others is bound to the
    invitation: nothing once its maximum quota is reached, otherwise the
    invitation's type (every type for the wildcard one) still having slots.

    Args:
        user: User filling in the registration
        invitation: Invitation of the focal user for the event, if any
        request_for: RequestFor value of the registration
        tenant: Tenant owning the event

    Returns:
        list[ParticipantType]: Allowed types, ordered by priority then name

    """
    all_types = ParticipantType.objects.filter(tenant=tenant).exclude(name=ALL_PARTICIPANT_TYPES)

    if request_for == RequestFor.MYSELF or not is_focal(user, tenant):
        return list(all_types)

    if invitation is None:
        return []

    if invitation_quota_reached(invitation):
        logger.debug("Invitation %s reached its maximum quota", invitation.pk)
        return []

    if invitation.participant_type.is_wildcard():
        candidates = list(all_types)
    else:
        candidates = [invitation.participant_type]

    return [participant_type for participant_type in candidates if slots_for_type(invitation, participant_type) > 0]


def get_user_invitations(user: Any, event: Event):
    """Return the invitations addressed to the user for the event."""
    return (
        Invitation.objects.filter(tenant_id=event.tenant_id, event=event, email=user.email)
        .select_related("participant_type", "restriction")
        .order_by("organization")
    )


def closed_session_available(user: Any, event: Event) -> int:
    """Compute the closed session slots left to the user for an event.

    The quota comes from the first closed session constraint among the
    restrictions of the user's invitations, and is shared by every
    participant registered through any of them.

    Returns:
        int: Remaining slots, 0 without a closed session constraint

    """
    invitations = list(get_user_invitations(user, event))
    restriction_ids = [invitation.restriction_id for invitation in invitations if invitation.restriction_id]

    constraint = (
        Constraint.objects.filter(restriction_id__in=restriction_ids, name=CLOSED_SESSION).order_by("id").first()
    )
    quota = constraint.quota if constraint else 0

    meeting = get_closed_session_meeting(event.tenant_id)
    if meeting is None:
        return quota

    taken = (
        Participant.objects.filter(
            tenant_id=event.tenant_id,
            event=event,
            invitation__in=invitations,
            meetings=meeting,
        )
        .distinct()
        .count()
    )
    return quota - taken
