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
from django.db.models import Q, UniqueConstraint
from django.utils.translation import gettext_lazy as _

from accreditation.models.base import AlphanumericValidator, BaseModel

# Pseudo participant type meaning "any type" on invitations
ALL_PARTICIPANT_TYPES = "All"

# Meeting type whose wishlist membership is capped by the closed session constraint
CLOSED_SESSION = "Closed Session"


class Tenant(BaseModel):
    name = models.CharField(max_length=100, help_text=_("Complete name of the organization"))

    slug = models.CharField(
        max_length=20,
        verbose_name=_("URL identifier"),
        validators=[AlphanumericValidator],
        db_index=True,
    )

    email = models.EmailField(
        blank=True,
        null=True,
        help_text="(" + _("Optional") + ") " + _("Contact address used as sender for communications"),
    )

    phone = models.CharField(max_length=30, blank=True)

    website = models.URLField(blank=True)

    class Meta:
        ordering: ClassVar[list] = ["name"]
        constraints: ClassVar[list] = [
            UniqueConstraint(fields=["slug", "deleted"], name="unique_tenant_slug_with_optional"),
            UniqueConstraint(fields=["slug"], condition=Q(deleted=None), name="unique_tenant_slug_without_optional"),
        ]


class Role(BaseModel):
    """A tenant level role, owner of workflow steps."""

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="roles")

    name = models.CharField(max_length=100)

    members = models.ManyToManyField(User, related_name="accreditation_roles", blank=True)

    class Meta:
        constraints: ClassVar[list] = [
            UniqueConstraint(fields=["tenant", "name", "deleted"], name="unique_role_with_optional"),
            UniqueConstraint(fields=["tenant", "name"], condition=Q(deleted=None), name="unique_role_without_optional"),
        ]


class ParticipantType(BaseModel):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="participant_types")

    name = models.CharField(max_length=100, help_text=_("Classification, e.g. Delegate or Press / Media"))

    description = models.CharField(max_length=500, blank=True)

    priority = models.IntegerField(default=0, help_text=_("Higher values are listed first"))

    is_exempted = models.BooleanField(default=False, help_text=_("Exempted from quota checks"))

    class Meta:
        ordering: ClassVar[list] = ["-priority", "name"]

    def is_wildcard(self) -> bool:
        """Return whether this is the pseudo type granting every type."""
        return self.name == ALL_PARTICIPANT_TYPES


class MeetingType(BaseModel):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="meeting_types")

    name = models.CharField(max_length=100)

    class Meta:
        ordering: ClassVar[list] = ["name"]
