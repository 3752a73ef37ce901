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

from django.contrib import admin, messages

from accreditation.admin.base import DefModelAdmin, EventFilter, ParticipantFilter, ParticipantTypeFilter, TenantFilter
from accreditation.models.approval import Approval
from accreditation.models.draft import Draft
from accreditation.models.registration import Constraint, Invitation, Participant, Restriction
from accreditation.models.workflow import Action
from accreditation.utils.permission import can_process
from accreditation.utils.workflow import process_participant

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from django.http import HttpRequest


class ConstraintInline(admin.TabularInline):
    """Inline admin for Constraint model within Restriction admin."""

    model = Constraint
    fields = ("name", "participant_type", "access_level", "quota")


@admin.register(Restriction)
class RestrictionAdmin(DefModelAdmin):
    list_display = ("name", "event", "tenant")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["tenant", "event"]
    list_filter = (TenantFilter, EventFilter)
    inlines: ClassVar[list] = [ConstraintInline]


@admin.register(Constraint)
class ConstraintAdmin(DefModelAdmin):
    list_display = ("name", "restriction", "participant_type", "access_level", "quota")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["restriction", "participant_type"]
    list_filter = (ParticipantTypeFilter, "access_level")


@admin.register(Invitation)
class InvitationAdmin(DefModelAdmin):
    list_display = ("organization", "email", "event", "participant_type", "maximum_quota", "restriction")
    search_fields: ClassVar[list] = ["organization", "email"]
    autocomplete_fields: ClassVar[list] = ["tenant", "event", "participant_type", "restriction"]
    list_filter = (EventFilter, ParticipantTypeFilter)


def _process_selected(modeladmin: ParticipantAdmin, request: HttpRequest, queryset: QuerySet, action: str) -> None:
    processed = 0
    for participant in queryset.select_related("step"):
        if not can_process(request.user, participant):
            continue
        process_participant(participant.id, request.user.id, action)
        processed += 1
    modeladmin.message_user(request, f"{action}: {processed} of {queryset.count()} requests processed", messages.INFO)


@admin.action(description="Approve selected requests")
def approve_participants(modeladmin: ParticipantAdmin, request: HttpRequest, queryset: QuerySet) -> None:
    _process_selected(modeladmin, request, queryset, Action.APPROVE)


@admin.action(description="Reject selected requests")
def reject_participants(modeladmin: ParticipantAdmin, request: HttpRequest, queryset: QuerySet) -> None:
    _process_selected(modeladmin, request, queryset, Action.REJECT)


@admin.register(Participant)
class ParticipantAdmin(DefModelAdmin):
    """Admin interface for Participant model.

    Step and status only change through the workflow actions.
    """

    list_display = ("registration_code", "first_name", "family_name", "organization", "participant_type", "step", "status")
    search_fields: ClassVar[list] = ["registration_code", "first_name", "family_name", "email", "passport_number"]
    autocomplete_fields: ClassVar[list] = ["tenant", "event", "user", "participant_type", "invitation"]
    readonly_fields = ("registration_code", "step", "status")
    list_filter = (EventFilter, ParticipantTypeFilter, "status")
    actions: ClassVar[list] = [approve_participants, reject_participants]


@admin.register(Draft)
class DraftAdmin(DefModelAdmin):
    ordering: ClassVar[list] = ["-created"]
    list_display = ("user", "event", "participant_type", "created", "expires_at")
    autocomplete_fields: ClassVar[list] = ["user", "tenant", "event", "participant_type", "invitation", "participant"]
    list_filter = (EventFilter,)


@admin.register(Approval)
class ApprovalAdmin(DefModelAdmin):
    """Read-only admin for the approval log."""

    ordering: ClassVar[list] = ["-created"]
    list_display = ("participant", "step", "user", "result", "remarks", "created")
    search_fields: ClassVar[list] = ["participant__registration_code", "remarks"]
    list_filter = (ParticipantFilter, "result")

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Approval | None = None) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Approval | None = None) -> bool:
        return False
