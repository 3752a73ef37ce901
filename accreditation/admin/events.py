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

from django.contrib import admin

from accreditation.admin.base import DefModelAdmin, EventFilter, TenantFilter, WorkflowFilter
from accreditation.models.event import Event
from accreditation.models.workflow import Step, Workflow


class StepInline(admin.TabularInline):
    """Inline admin for Step model within Workflow admin."""

    model = Step
    fk_name = "workflow"
    fields = ("order", "name", "action", "role", "next_step")
    show_change_link = True


@admin.register(Event)
class EventAdmin(DefModelAdmin):
    list_display = ("name", "tenant", "start_date", "end_date", "status")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["tenant"]
    list_filter = (TenantFilter, "status")


@admin.register(Workflow)
class WorkflowAdmin(DefModelAdmin):
    """Admin interface for Workflow model, checking the step chain on save."""

    list_display = ("name", "event", "participant_type", "chain_ok")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["event", "participant_type"]
    list_filter = (EventFilter,)
    inlines: ClassVar[list] = [StepInline]

    @admin.display(boolean=True, description="Valid chain")
    def chain_ok(self, obj: Workflow) -> bool:
        return obj.check_chain()


@admin.register(Step)
class StepAdmin(DefModelAdmin):
    list_display = ("name", "workflow", "order", "action", "role", "next_step")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["workflow", "role", "next_step"]
    list_filter = (WorkflowFilter, "action")
