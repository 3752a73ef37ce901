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

from typing import Any, ClassVar

from django.contrib.auth.models import User
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accreditation.models.registration import Participant
from accreditation.models.workflow import Step
from accreditation.utils.core.exceptions import ApprovalImmutableError


class ApprovalResult(models.TextChoices):
    SUCCESS = "SUCCESS", _("Success")
    FAILURE = "FAILURE", _("Failure")


class Approval(models.Model):
    """Append-only audit record of one action taken on one participant at one step."""

    participant = models.ForeignKey(Participant, on_delete=models.PROTECT, related_name="approvals")

    step = models.ForeignKey(Step, on_delete=models.PROTECT, related_name="approvals")

    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="approvals")

    result = models.CharField(max_length=10, choices=ApprovalResult.choices)

    remarks = models.TextField(max_length=2000, blank=True)

    created = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering: ClassVar[list] = ["-created", "-id"]
        constraints: ClassVar[list] = [
            UniqueConstraint(fields=["participant", "step", "user", "created"], name="unique_approval"),
        ]

    def __str__(self) -> str:
        return f"{self.participant_id} {self.step} {self.result}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Insert the record, refusing any later update."""
        if self.pk is not None:
            msg = "Approvals cannot be modified"
            raise ApprovalImmutableError(msg)
        super().save(*args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> Any:
        msg = "Approvals cannot be deleted"
        raise ApprovalImmutableError(msg)
