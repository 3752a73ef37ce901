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

from typing import ClassVar

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from accreditation.models.base import BaseModel
from accreditation.models.event import Event
from accreditation.models.tenant import ParticipantType, Role


class Action(models.TextChoices):
    APPROVE = "APPROVE", _("Approve")
    REJECT = "REJECT", _("Reject")
    PRINT = "PRINT", _("Print")
    NOTIFY = "NOTIFY", _("Notify")
    ARCHIVE = "ARCHIVE", _("Archive")


class Workflow(BaseModel):
    """An ordered chain of steps for one event and participant type."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="workflows")

    participant_type = models.ForeignKey(
        ParticipantType,
        on_delete=models.CASCADE,
        related_name="workflows",
        null=True,
        blank=True,
    )

    name = models.CharField(max_length=100)

    def ordered_steps(self) -> list[Step]:
        """Return the steps following the next step links from the head.

        Raises:
            ValidationError: If the chain has no head, several terminals, a
                cycle, or steps unreachable from the head.

        """
        # noinspection PyUnresolvedReferences
        steps = {step.id: step for step in self.steps.all()}
        if not steps:
            return []

        terminals = [step for step in steps.values() if step.next_step_id is None]
        if len(terminals) != 1:
            raise ValidationError(_("A workflow must have exactly one terminal step"))

        successors = {step.next_step_id for step in steps.values() if step.next_step_id}
        heads = [step for step in steps.values() if step.id not in successors]
        if len(heads) != 1:
            raise ValidationError(_("A workflow must have exactly one first step"))

        chain = []
        visited = set()
        current = heads[0]
        while current is not None:
            if current.id in visited:
                raise ValidationError(_("Workflow steps form a cycle"))
            visited.add(current.id)
            chain.append(current)
            current = steps.get(current.next_step_id)

        if len(chain) != len(steps):
            raise ValidationError(_("Some workflow steps are not linked to the chain"))

        return chain

    def check_chain(self) -> bool:
        """Return whether the steps form a valid singly linked list."""
        try:
            self.ordered_steps()
        except ValidationError:
            return False
        return True


class Step(BaseModel):
    """A gate of a workflow, owned by a role and reached through an action."""

    workflow = models.ForeignKey(Workflow, on_delete=models.CASCADE, related_name="steps")

    order = models.IntegerField(default=0)

    name = models.CharField(max_length=100)

    description = models.CharField(max_length=500, blank=True)

    action = models.CharField(max_length=10, choices=Action.choices, default=Action.APPROVE)

    role = models.ForeignKey(Role, on_delete=models.SET_NULL, related_name="steps", null=True, blank=True)

    next_step = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        related_name="previous_steps",
        null=True,
        blank=True,
    )

    class Meta:
        ordering: ClassVar[list] = ["workflow", "order"]
        indexes: ClassVar[list] = [
            models.Index(fields=["workflow", "name"], name="step_workflow_name"),
        ]

    def __str__(self) -> str:
        return f"{self.order}. {self.name} ({self.get_action_display()})"

    def is_terminal(self) -> bool:
        return self.next_step_id is None
