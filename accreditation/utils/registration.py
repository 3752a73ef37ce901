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
import secrets
from typing import TYPE_CHECKING, Any

from django.conf import settings as conf_settings
from django.core.exceptions import ValidationError
from django.db import transaction

from accreditation.mail.workflow import send_registration_code_email
from accreditation.models.registration import Invitation, Participant, RequestFor, RequestStatus
from accreditation.models.workflow import Action, Step, Workflow
from accreditation.utils.core.exceptions import CodeGenerationError, QuotaExceededError
from accreditation.utils.quota import invitation_quota_reached, slots_for_type
from accreditation.utils.workflow import get_workflow_routing, process_participant

if TYPE_CHECKING:
    from accreditation.models.draft import Draft
    from accreditation.models.event import Event
    from accreditation.models.tenant import ParticipantType

logger = logging.getLogger(__name__)

REGISTRATION_CODE_ATTEMPTS = 5

# Applicant data copied from the draft to the participant
APPLICANT_FIELDS = (
    "request_for",
    "gender",
    "title",
    "first_name",
    "family_name",
    "date_of_birth",
    "nationality",
    "passport_number",
    "passport_expiry",
    "job_title",
    "country",
    "city",
    "website",
    "telephone",
    "address",
    "preferred_language",
    "needs_visa",
    "needs_car_pass",
    "vehicle_type",
    "vehicle_plate_number",
    "needs_car_from_organizer",
    "flight_number",
    "arrival_date",
)

# Applicant data a request cannot be submitted without
REQUIRED_FIELDS = {
    "first_name": "First name is required",
    "family_name": "Family name is required",
    "title": "Title is required",
    "gender": "Gender is required",
    "date_of_birth": "Date of birth is required",
    "nationality": "Nationality is required",
    "passport_number": "Passport number is required",
    "passport_expiry": "Passport expiry is required",
    "organization": "Organization is required",
    "job_title": "Job title is required",
    "country": "Country is required",
    "city": "City is required",
    "email": "Email is required",
    "preferred_language": "Preferred language is required",
}


def create_registration_code(event: Event, participant_type: ParticipantType | None) -> str:
    """Build a registration code candidate.

    The code reads EVENTPREFIX-TYPEPREFIX-YY-NNNNNN: the first three letters of
    the event name, the first two of the participant type name, the last two
    digits of the event start year and six random digits. Uniqueness is left
    to the caller.
    """
    event_prefix = event.name[:3].upper() or "EVT"
    type_prefix = (participant_type.name[:2].upper() if participant_type else "") or "PT"
    year = event.start_date.strftime("%y")
    suffix = f"{secrets.randbelow(1_000_000):06d}"
    return f"{event_prefix}-{type_prefix}-{year}-{suffix}"


def generate_registration_code(event: Event, participant_type: ParticipantType | None) -> str:
    """Generate a registration code not used by any participant.

    Args:
        event: Event the participant registers to
        participant_type: Type chosen by the participant

    Returns:
        str: A registration code free at the time of the check

    Raises:
        CodeGenerationError: If every attempt collided with an existing code

    """
    attempts = getattr(conf_settings, "REGISTRATION_CODE_ATTEMPTS", REGISTRATION_CODE_ATTEMPTS)
    for _try in range(attempts):
        code = create_registration_code(event, participant_type)
        # Soft deleted participants still hold their code
        if not Participant.all_objects.filter(registration_code=code).exists():
            return code
        logger.debug("Registration code %s already taken", code)

    raise CodeGenerationError(attempts)


def get_initial_step(event: Event, participant_type: ParticipantType) -> Step:
    """Find the step new requests enter, in the workflow of the event for the type.

    A workflow bound to the participant type is preferred over the event's
    generic one; when neither holds the step it is looked up among all steps.

    Raises:
        Step.DoesNotExist: If no step carries the initial step name

    """
    step_name = get_workflow_routing()["initial_step"]
    workflows = Workflow.objects.filter(event=event, participant_type=participant_type)
    if not workflows.exists():
        workflows = Workflow.objects.filter(event=event, participant_type__isnull=True)

    step = Step.objects.filter(workflow__in=workflows, name=step_name).order_by("order", "id").first()
    if step:
        return step

    logger.warning("No '%s' step in the workflows of event %s", step_name, event.pk)
    return Step.objects.filter(name=step_name).order_by("id")[:1].get()


def check_required_fields(draft: Draft, email: str, organization: str) -> None:
    """Raise ValidationError listing every required value the draft lacks."""
    values = {field_name: getattr(draft, field_name) for field_name in REQUIRED_FIELDS}
    values["email"] = email
    values["organization"] = organization
    missing = [message for field_name, message in REQUIRED_FIELDS.items() if not values[field_name]]
    if missing:
        raise ValidationError(missing)


def check_registration_quota(invitation: Invitation, participant_type: ParticipantType) -> None:
    """Raise QuotaExceededError if the invitation cannot admit one more participant of the type.

    Must run inside a transaction: the constraint of the type stays locked
    until it ends, as the invitation row locked by the caller does.
    """
    if invitation_quota_reached(invitation) or slots_for_type(invitation, participant_type, lock=True) <= 0:
        raise QuotaExceededError(invitation_id=invitation.pk, participant_type_id=participant_type.pk)


def submit_registration(draft: Draft, user: Any, lookup_url: str = "") -> Participant:
    """Turn a registration draft into a participant request.

    The invitation row, and the constraint capping the chosen type, are
    locked while the quota is checked and the participant written, so
    concurrent submissions counted against the same quota are admitted one at
    a time, whichever invitation they come through. Once committed, the
    registration code is mailed and the request is moved past its reception
    steps.

    Args:
        draft: Complete draft of the user
        user: User submitting the draft
        lookup_url: Optional absolute url where the request can be followed

    Returns:
        Participant: The created or updated participant

    Raises:
        ValidationError: If the draft has no participant type, or misses required data
        QuotaExceededError: If the invitation or type quota is used up
        CodeGenerationError: If no unique registration code could be generated

    """
    if not draft.participant_type_id:
        raise ValidationError("Invalid draft state")

    email = user.email if draft.request_for == RequestFor.MYSELF else draft.email
    organization = draft.invitation.organization if draft.invitation_id else draft.organization
    check_required_fields(draft, email, organization)

    with transaction.atomic():
        invitation = None
        if draft.invitation_id:
            invitation = Invitation.objects.select_for_update().get(pk=draft.invitation_id)

        participant = None
        if draft.participant_id:
            participant = Participant.objects.select_for_update().get(pk=draft.participant_id)

        is_new = participant is None
        type_changed = not is_new and participant.participant_type_id != draft.participant_type_id
        if invitation and (is_new or type_changed):
            check_registration_quota(invitation, draft.participant_type)

        if is_new:
            participant = Participant(
                registration_code=generate_registration_code(draft.event, draft.participant_type),
            )
        elif not participant.registration_code:
            participant.registration_code = generate_registration_code(draft.event, draft.participant_type)

        participant.user = user
        participant.tenant_id = draft.tenant_id
        participant.event_id = draft.event_id
        participant.participant_type_id = draft.participant_type_id
        participant.invitation = invitation
        participant.step = get_initial_step(draft.event, draft.participant_type)
        participant.status = RequestStatus.PENDING
        for field_name in APPLICANT_FIELDS:
            setattr(participant, field_name, getattr(draft, field_name))
        participant.email = email
        participant.organization = organization
        participant.save()
        participant.meetings.set(draft.meetings.all())

        draft.delete()

    logger.info("Registration %s submitted by user %s", participant.registration_code, user.pk)

    try:
        send_registration_code_email(participant, lookup_url)
    except Exception:
        logger.exception("Registration code mail failed for participant %s", participant.pk)

    label = "Initial" if is_new else "Updated"
    process_participant(participant.pk, user.pk, Action.APPROVE, f"{label} Request Received")
    process_participant(participant.pk, user.pk, Action.APPROVE, f"{label} Request Reviewed")

    participant.refresh_from_db()
    return participant
