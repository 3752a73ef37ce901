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

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_POST

from accreditation.models.registration import Participant
from accreditation.utils.core.exceptions import (
    CodeGenerationError,
    DraftNotFoundError,
    QuotaExceededError,
    UnsupportedActionError,
)
from accreditation.utils.drafts import cancel_draft, get_active_draft
from accreditation.utils.permission import can_process
from accreditation.utils.registration import submit_registration
from accreditation.utils.workflow import process_participant

logger = logging.getLogger(__name__)


def participant_data(participant: Participant) -> dict:
    return {
        "id": participant.id,
        "registration_code": participant.registration_code,
        "step": participant.step.name,
        "status": participant.status,
    }


@login_required
@require_POST
def participant_process(request: HttpRequest, participant_id: int) -> JsonResponse:
    """Apply an approver's action to a participant.

    Expects the action and optional remarks as POST fields; the user must be
    allowed on the participant's current step.

    Returns:
        JsonResponse: Participant step and status after the action, with
            403 without permission and 400 for an unsupported action

    """
    participant = get_object_or_404(Participant.objects.select_related("step"), pk=participant_id)
    if not can_process(request.user, participant):
        return JsonResponse({"error": "You are not allowed to process this request"}, status=403)

    remarks = request.POST.get("remarks") or None
    try:
        transition = process_participant(participant.id, request.user.id, request.POST.get("action"), remarks)
    except UnsupportedActionError as err:
        return JsonResponse({"error": str(err)}, status=400)

    participant.refresh_from_db()
    return JsonResponse({**participant_data(participant), "changed": transition is not None})


@login_required
@require_POST
def registration_submit(request: HttpRequest) -> JsonResponse:
    """Submit the active draft of the user as a participant request."""
    try:
        draft = get_active_draft(request.user)
    except DraftNotFoundError:
        return JsonResponse({"error": "No draft found"}, status=404)

    try:
        participant = submit_registration(draft, request.user)
    except ValidationError as err:
        return JsonResponse({"error": " ".join(err.messages)}, status=400)
    except QuotaExceededError as err:
        return JsonResponse({"error": str(err)}, status=409)
    except IntegrityError:
        logger.warning("Duplicate registration submitted by user %s", request.user.pk)
        return JsonResponse({"error": "This request duplicates an existing registration"}, status=409)
    except CodeGenerationError as err:
        logger.exception("Registration code generation failed for user %s", request.user.pk)
        return JsonResponse({"error": str(err)}, status=500)

    return JsonResponse(participant_data(participant), status=201)


@login_required
@require_POST
def registration_cancel(request: HttpRequest) -> JsonResponse:
    """Drop the registration draft of the user."""
    return JsonResponse({"cancelled": cancel_draft(request.user)})
