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

from itertools import chain
from typing import Any, ClassVar

from django.core.validators import RegexValidator
from django.db import models, transaction
from django.utils import timezone
from safedelete.models import SOFT_DELETE_CASCADE, SafeDeleteModel

AlphanumericValidator = RegexValidator(r"^[0-9a-z_-]*$", "Only characters allowed are: 0-9, a-z, _, -.")

# Parent fields that scope sequential numbering, in order of preference
SEQUENCE_SCOPES = ("workflow", "event", "tenant")


class BaseModel(SafeDeleteModel):
    """Represents BaseModel model."""

    created = models.DateTimeField(default=timezone.now, editable=False)

    updated = models.DateTimeField(auto_now=True)

    _safedelete_policy = SOFT_DELETE_CASCADE

    class Meta:
        abstract = True
        ordering: ClassVar[list] = ["-updated"]

    def __str__(self) -> str:
        """Return string representation of the model.

        Returns:
            str: Model name if present, otherwise the parent representation.

        """
        if hasattr(self, "name"):
            return self.name

        return super().__str__()

    def as_dict(self, *, many_to_many: bool = True) -> dict[str, Any]:
        """Convert model instance to dictionary representation.

        Args:
            many_to_many: Whether to include many-to-many relationships in the
                output dictionary. Defaults to True.

        Returns:
            A dictionary with field names as keys and field values as data.
            Many-to-many fields are represented as lists of related object IDs

        """
        # noinspection PyUnresolvedReferences
        model_options = self._meta
        serialized_data = {}

        for field in chain(model_options.concrete_fields, model_options.private_fields):
            field_value = field.value_from_object(self)
            # Only include fields with truthy values to keep dict clean
            if field_value:
                serialized_data[field.name] = field_value

        if many_to_many:
            for m2m_field in model_options.many_to_many:
                related_ids = [related_obj.id for related_obj in m2m_field.value_from_object(self)]
                if len(related_ids) > 0:
                    serialized_data[m2m_field.name] = related_ids

        return serialized_data


def auto_assign_sequential_numbers(instance: Any) -> None:
    """Auto-populate the order field for model instances.

    The next value is computed within the closest parent scope (workflow,
    event or tenant) the instance belongs to.
    """
    if not hasattr(instance, "order") or instance.order:
        return

    for scope in SEQUENCE_SCOPES:
        parent_id = getattr(instance, f"{scope}_id", None)
        if not parent_id:
            continue

        queryset = instance.__class__.objects.filter(**{f"{scope}_id": parent_id})
        # Use select_for_update() to lock rows and prevent race conditions
        with transaction.atomic():
            max_instance = queryset.select_for_update().order_by("-order").first()
            instance.order = max_instance.order + 1 if max_instance else 1
        return
