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

from typing import TYPE_CHECKING

from django.template.loader import render_to_string

from accreditation.utils.tasks import send_notification

if TYPE_CHECKING:
    from accreditation.models.registration import Participant


def send_rejection_email(participant: Participant) -> None:
    """Tell the participant the request was rejected."""
    send_notification(
        participant.email,
        "Request Rejected",
        "Your request has been rejected.",
        render_to_string("mails/request_rejected.html", {"participant": participant}),
        tenant_id=participant.tenant_id,
    )


def send_finalized_email(participant: Participant) -> None:
    """Tell the participant the request is finalized and the badge can be collected."""
    send_notification(
        participant.email,
        "Request Finalized",
        "Your request has been finalized.",
        render_to_string("mails/request_finalized.html", {"participant": participant}),
        tenant_id=participant.tenant_id,
    )


def send_registration_code_email(participant: Participant, lookup_url: str = "") -> None:
    """Send the registration code right after the request is submitted.

    Args:
        participant: The participant just created or updated
        lookup_url: Optional absolute url where the request can be followed

    """
    context = {
        "participant": participant,
        "participant_name": f"{participant.first_name} {participant.family_name}".strip(),
        "registration_code": participant.registration_code,
        "event_name": participant.event.name,
        "lookup_url": lookup_url,
    }
    send_notification(
        participant.email,
        "Event Registration Code",
        f"Your registration code is: {participant.registration_code}",
        render_to_string("mails/registration_code.html", context),
        tenant_id=participant.tenant_id,
    )
