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

from typing import Any, ClassVar

from django import forms
from django.utils.translation import gettext_lazy as _

from accreditation.models.draft import Draft
from accreditation.models.registration import Participant, RequestFor
from accreditation.models.tenant import ALL_PARTICIPANT_TYPES, ParticipantType
from accreditation.utils.quota import allowed_participant_types, get_user_invitations


class GeneralInfoForm(forms.ModelForm):
    """General information step of the registration draft.

    The participant type choices depend on who registers whom: see
    allowed_participant_types. Expects the registering user in the context.
    """

    class Meta:
        model = Draft
        fields: ClassVar[list] = [
            "request_for",
            "participant_type",
            "gender",
            "title",
            "first_name",
            "family_name",
            "date_of_birth",
            "nationality",
            "passport_number",
            "passport_expiry",
            "email",
            "organization",
            "job_title",
            "country",
            "city",
            "website",
            "telephone",
            "address",
            "preferred_language",
            "meetings",
        ]
        widgets: ClassVar[dict] = {
            "date_of_birth": forms.DateInput(attrs={"type": "date"}),
            "passport_expiry": forms.DateInput(attrs={"type": "date"}),
            "meetings": forms.CheckboxSelectMultiple(),
        }

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Initialize the form and restrict the participant type choices.

        Args:
            *args: Positional arguments passed to ModelForm
            **kwargs: Keyword arguments passed to ModelForm, plus context with
                the registering user and optionally the invitation

        """
        self.params = kwargs.pop("context", {})
        super().__init__(*args, **kwargs)

        draft = self.instance
        self.user = self.params.get("user", draft.user)
        self.invitation = self.params.get("invitation", draft.invitation)
        if self.invitation is None:
            self.invitation = get_user_invitations(self.user, draft.event).first()

        request_for = self.data.get("request_for") if self.is_bound else draft.request_for
        allowed = allowed_participant_types(self.user, self.invitation, request_for, draft.tenant)
        self.allowed_type_ids = {participant_type.id for participant_type in allowed}
        self.fields["participant_type"].queryset = ParticipantType.objects.filter(tenant=draft.tenant).exclude(
            name=ALL_PARTICIPANT_TYPES,
        )
        self.fields["participant_type"].required = True

        self.fields["meetings"].queryset = draft.tenant.meeting_types.all()

    def clean(self) -> dict:
        """Reject duplicate registrations and participant types out of quota."""
        cleaned_data = super().clean()
        draft = self.instance

        participants = Participant.objects.filter(tenant_id=draft.tenant_id, event_id=draft.event_id)
        if draft.participant_id:
            participants = participants.exclude(pk=draft.participant_id)

        if cleaned_data.get("request_for") == RequestFor.MYSELF:
            if participants.filter(email=self.user.email).exists():
                raise forms.ValidationError(_("You have already been registered for this event."))

        email = cleaned_data.get("email")
        if cleaned_data.get("request_for") == RequestFor.OTHERS and email:
            if participants.filter(email=email).exists():
                self.add_error("email", _("A participant with this email is already registered for this event."))

        passport_number = cleaned_data.get("passport_number")
        if passport_number and participants.filter(passport_number=passport_number).exists():
            self.add_error("passport_number", _("A participant with this passport number already exists."))

        participant_type = cleaned_data.get("participant_type")
        if participant_type and participant_type.id not in self.allowed_type_ids:
            self.add_error("participant_type", _("Maximum quota reached for this participant type."))

        # Only registrations on behalf of others go through the invitation
        if cleaned_data.get("request_for") == RequestFor.OTHERS:
            self.instance.invitation = self.invitation
        else:
            self.instance.invitation = None

        return cleaned_data
