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

from accreditation.admin.base import DefModelAdmin, TenantFilter
from accreditation.models.tenant import MeetingType, ParticipantType, Role, Tenant


@admin.register(Tenant)
class TenantAdmin(DefModelAdmin):
    list_display = ("name", "slug", "email", "phone")
    search_fields: ClassVar[list] = ["name", "slug"]


@admin.register(Role)
class RoleAdmin(DefModelAdmin):
    list_display = ("name", "tenant")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["tenant", "members"]
    list_filter = (TenantFilter,)


@admin.register(ParticipantType)
class ParticipantTypeAdmin(DefModelAdmin):
    list_display = ("name", "tenant", "priority", "is_exempted")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["tenant"]
    list_filter = (TenantFilter, "is_exempted")


@admin.register(MeetingType)
class MeetingTypeAdmin(DefModelAdmin):
    list_display = ("name", "tenant")
    search_fields: ClassVar[list] = ["name"]
    autocomplete_fields: ClassVar[list] = ["tenant"]
    list_filter = (TenantFilter,)
