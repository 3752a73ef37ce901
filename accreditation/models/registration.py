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

from typing import ClassVar

from django.contrib.auth.models import User
from django.db import models
from django.db.models import Q
from django.db.models.constraints import UniqueConstraint
from django.utils.translation import gettext_lazy as _
from phonenumber_field.modelfields import PhoneNumberField

from accreditation.models.base import BaseModel
from accreditation.models.event import Event
from accreditation.models.tenant import CLOSED_SESSION, MeetingType, ParticipantType, Tenant
from accreditation.models.workflow import Step


class RequestStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    INPROGRESS = "INPROGRESS", _("In progress")
    APPROVED = "APPROVED", _("Approved")
    REJECTED = "REJECTED", _("Rejected")
    CANCELLED = "CANCELLED", _("Cancelled")
    PRINTED = "PRINTED", _("Printed")
    NOTIFIED = "NOTIFIED", _("Notified")
    ARCHIVED = "ARCHIVED", _("Archived")
    BYPASSED = "BYPASSED", _("Bypassed")


class RequestFor(models.TextChoices):
    MYSELF = "MYSELF", _("Myself")
    OTHERS = "OTHERS", _("Others")


class GenderChoices(models.TextChoices):
    MALE = "m", _("Male")
    FEMALE = "f", _("Female")


class AccessLevel(models.TextChoices):
    OPEN = "OPEN", _("Open")
    CLOSED = "CLOSED", _("Closed")


class Restriction(BaseModel):
    """Groups the constraints capping an invitation."""

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="restrictions")

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="restrictions")

    name = models.CharField(max_length=100)


class Constraint(BaseModel):
    """Caps the participants of one type and access level, per organization."""

    restriction = models.ForeignKey(Restriction, on_delete=models.CASCADE, related_name="constraints")

    name = models.CharField(max_length=100)

    quota = models.IntegerField(help_text=_("Maximum number of participants"))

    participant_type = models.ForeignKey(ParticipantType, on_delete=models.CASCADE, related_name="constraints")

    access_level = models.CharField(max_length=10, choices=AccessLevel.choices, default=AccessLevel.OPEN)

    def __str__(self) -> str:
        return f"{self.name} ({self.quota})"

    def is_closed_session(self) -> bool:
        return self.name == CLOSED_SESSION


class Invitation(BaseModel):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="invitations")

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="invitations")

    email = models.EmailField()

    organization = models.CharField(max_length=200)

    participant_type = models.ForeignKey(ParticipantType, on_delete=models.CASCADE, related_name="invitations")

    maximum_quota = models.IntegerField(
        null=True,
        blank=True,
        help_text=_("Optional - Maximum number of participants for this organization"),
    )

    restriction = models.ForeignKey(
        Restriction,
        on_delete=models.SET_NULL,
        related_name="invitations",
        null=True,
        blank=True,
    )

    class Meta:
        ordering: ClassVar[list] = ["organization"]
        indexes: ClassVar[list] = [
            models.Index(fields=["tenant", "event", "email"], name="invitation_event_email"),
        ]

    def __str__(self) -> str:
        return f"{self.organization} - {self.email}"


class ApplicantFields(models.Model):
    """Fields filled in by the applicant, shared by drafts and participants."""

    request_for = models.CharField(max_length=10, choices=RequestFor.choices, default=RequestFor.MYSELF)

    gender = models.CharField(max_length=1, choices=GenderChoices.choices, blank=True)

    title = models.CharField(max_length=20, blank=True)

    first_name = models.CharField(max_length=100, blank=True, verbose_name=_("First name"))

    family_name = models.CharField(max_length=100, blank=True, verbose_name=_("Family name"))

    date_of_birth = models.DateField(null=True, blank=True)

    nationality = models.CharField(max_length=100, blank=True)

    passport_number = models.CharField(max_length=50, blank=True)

    passport_expiry = models.DateField(null=True, blank=True)

    email = models.EmailField(blank=True)

    organization = models.CharField(max_length=200, blank=True)

    job_title = models.CharField(max_length=100, blank=True)

    country = models.CharField(max_length=100, blank=True)

    city = models.CharField(max_length=100, blank=True)

    website = models.URLField(blank=True)

    telephone = PhoneNumberField(blank=True)

    address = models.CharField(max_length=500, blank=True)

    preferred_language = models.CharField(max_length=10, blank=True)

    needs_visa = models.BooleanField(default=False)

    needs_car_pass = models.BooleanField(default=False)

    vehicle_type = models.CharField(max_length=50, blank=True)

    vehicle_plate_number = models.CharField(max_length=20, blank=True)

    needs_car_from_organizer = models.BooleanField(default=False)

    flight_number = models.CharField(max_length=20, blank=True)

    arrival_date = models.DateField(null=True, blank=True)

    meetings = models.ManyToManyField(MeetingType, related_name="%(class)s_wishlists", blank=True)

    class Meta:
        abstract = True


class Participant(BaseModel, ApplicantFields):
    """The subject moving through the accreditation workflow."""

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="participants")

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="participants")

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="participants")

    participant_type = models.ForeignKey(ParticipantType, on_delete=models.PROTECT, related_name="participants")

    invitation = models.ForeignKey(
        Invitation,
        on_delete=models.SET_NULL,
        related_name="participants",
        null=True,
        blank=True,
    )

    registration_code = models.CharField(max_length=30, unique=True, verbose_name=_("Registration code"))

    step = models.ForeignKey(Step, on_delete=models.PROTECT, related_name="participants")

    status = models.CharField(max_length=10, choices=RequestStatus.choices, default=RequestStatus.PENDING)

    class Meta:
        ordering: ClassVar[list] = ["-created"]
        indexes: ClassVar[list] = [
            models.Index(fields=["tenant", "event", "participant_type", "organization"], name="participant_type_org"),
            models.Index(fields=["invitation"], condition=Q(deleted__isnull=True), name="participant_invitation_act"),
        ]
        constraints: ClassVar[list] = [
            UniqueConstraint(
                fields=["tenant", "event", "email", "deleted"],
                name="unique_participant_email_with_optional",
            ),
            UniqueConstraint(
                fields=["tenant", "event", "email"],
                condition=Q(deleted=None),
                name="unique_participant_email_without_optional",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.family_name} ({self.registration_code})"
