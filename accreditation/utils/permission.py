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

from typing import TYPE_CHECKING, Any

from accreditation.models.tenant import Role

if TYPE_CHECKING:
    from accreditation.models.registration import Participant
    from accreditation.models.tenant import Tenant

FOCAL_ROLE = "focal"


def has_role(user: Any, tenant: Tenant, role_name: str) -> bool:
    """Check if the user is a member of the named role of the tenant.

    Args:
        user: Django user, possibly anonymous
        tenant: Tenant owning the role
        role_name: Role name, matched exactly

    Returns:
        bool: True if the user belongs to the role, False otherwise

    """
    if not user or not user.is_authenticated:
        return False

    return Role.objects.filter(tenant=tenant, name=role_name, members=user).exists()


def is_focal(user: Any, tenant: Tenant) -> bool:
    """Check if the user registers participants on behalf of an organization."""
    return has_role(user, tenant, FOCAL_ROLE)


def can_process(user: Any, participant: Participant) -> bool:
    """Check if the user may act on the participant's current step.

    Superusers may act on any step; everybody else must belong to the role
    owning the step. Steps without a role are reserved to superusers.
    """
    if not user or not user.is_authenticated:
        return False

    if user.is_superuser:
        return True

    role_id = participant.step.role_id
    if not role_id:
        return False

    return Role.objects.filter(pk=role_id, members=user).exists()
