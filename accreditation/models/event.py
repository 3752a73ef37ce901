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

from django.db import models
from django.utils.translation import gettext_lazy as _

from accreditation.models.base import BaseModel
from accreditation.models.tenant import Tenant


class EventStatus(models.TextChoices):
    DRAFT = "DRAFT", _("Draft")
    PUBLISHED = "PUBLISHED", _("Published")
    CLOSED = "CLOSED", _("Closed")


class Event(BaseModel):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="events")

    name = models.CharField(max_length=100)

    description = models.TextField(max_length=5000, blank=True, default="")

    venue = models.CharField(max_length=500, blank=True, help_text=_("Where it is held"))

    start_date = models.DateField(verbose_name=_("Start date"))

    end_date = models.DateField(verbose_name=_("End date"))

    status = models.CharField(max_length=10, choices=EventStatus.choices, default=EventStatus.DRAFT)

    class Meta:
        ordering: ClassVar[list] = ["start_date"]
        indexes: ClassVar[list] = [
            models.Index(fields=["tenant", "status"], name="event_tenant_status"),
        ]
