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

from admin_auto_filters.filters import AutocompleteFilter
from import_export.admin import ImportExportModelAdmin

from accreditation.models.tenant import Tenant

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from django.http import HttpRequest

# Role whose members manage a tenant from the admin
TENANT_ADMIN_ROLE = "admin"

# Lookup from each model to its tenant, in priority order
TENANT_LOOKUPS = (
    ("tenant", "tenant_id"),
    ("event", "event__tenant_id"),
    ("workflow", "workflow__event__tenant_id"),
    ("restriction", "restriction__tenant_id"),
    ("participant", "participant__tenant_id"),
)


class DefModelAdmin(ImportExportModelAdmin):
    """Base admin class with import/export and tenant filtering.

    Superusers see everything. Members of a tenant's admin role only see the
    objects of their tenants, reached through the first tenant related field
    of the model; models without one are hidden to them.
    """

    ordering: ClassVar[list] = ["-updated"]

    def _get_tenant_lookup(self) -> str | None:
        """Detect the lookup leading from the model to its tenant."""
        model_fields = {f.name for f in self.model._meta.get_fields()}  # noqa: SLF001

        if self.model is Tenant:
            return "id"

        for field, lookup in TENANT_LOOKUPS:
            if field in model_fields:
                return lookup

        return None

    def _get_managed_tenant_ids(self, request: HttpRequest) -> list[int]:
        return list(
            Tenant.objects.filter(roles__name=TENANT_ADMIN_ROLE, roles__members=request.user).values_list(
                "id",
                flat=True,
            ),
        )

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        """Filter queryset based on the tenants managed by the user.

        Args:
            request: HTTP request object

        Returns:
            Filtered queryset containing only objects the user can access

        """
        qs = super().get_queryset(request)

        # Superusers see everything
        if request.user.is_superuser:
            return qs

        tenant_lookup = self._get_tenant_lookup()
        if not tenant_lookup:
            return qs.none()

        return qs.filter(**{f"{tenant_lookup}__in": self._get_managed_tenant_ids(request)})

    def has_module_permission(self, request: HttpRequest) -> bool:
        """Show the module to superusers, and to tenant admins for tenant bound models."""
        if request.user.is_superuser:
            return super().has_module_permission(request)

        if not self._get_tenant_lookup() or not self._get_managed_tenant_ids(request):
            return False

        return super().has_module_permission(request)


class TenantFilter(AutocompleteFilter):
    """Admin filter for Tenant autocomplete."""

    title = "Tenant"
    field_name = "tenant"


class EventFilter(AutocompleteFilter):
    """Admin filter for Event autocomplete."""

    title = "Event"
    field_name = "event"


class WorkflowFilter(AutocompleteFilter):
    """Admin filter for Workflow autocomplete."""

    title = "Workflow"
    field_name = "workflow"


class ParticipantTypeFilter(AutocompleteFilter):
    """Admin filter for ParticipantType autocomplete."""

    title = "Participant type"
    field_name = "participant_type"


class ParticipantFilter(AutocompleteFilter):
    """Admin filter for Participant autocomplete."""

    title = "Participant"
    field_name = "participant"
