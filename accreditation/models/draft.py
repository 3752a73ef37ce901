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

from typing import TYPE_CHECKING, ClassVar

from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

from accreditation.models.event import Event
from accreditation.models.registration import ApplicantFields, Invitation, Participant
from accreditation.models.tenant import ParticipantType, Tenant

if TYPE_CHECKING:
    from datetime import datetime


class Draft(ApplicantFields):
    """The in-progress registration of one user, valid until it expires."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="registration_draft")

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="drafts")

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="drafts")

    participant_type = models.ForeignKey(
        ParticipantType,
        on_delete=models.SET_NULL,
        related_name="drafts",
        null=True,
        blank=True,
    )

    invitation = models.ForeignKey(
        Invitation,
        on_delete=models.SET_NULL,
        related_name="drafts",
        null=True,
        blank=True,
    )

    # Set when the draft edits an already submitted participant
    participant = models.ForeignKey(
        Participant,
        on_delete=models.CASCADE,
        related_name="drafts",
        null=True,
        blank=True,
    )

    created = models.DateTimeField(default=timezone.now, editable=False)

    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        ordering: ClassVar[list] = ["-created"]

    def __str__(self) -> str:
        return f"{self.user} - {self.event}"

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or timezone.now())
