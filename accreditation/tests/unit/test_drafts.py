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


from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from accreditation.models.draft import Draft
from accreditation.models.registration import RequestFor
from accreditation.tests.unit.base import BaseTestCase
from accreditation.utils.core.exceptions import DraftNotFoundError
from accreditation.utils.drafts import (
    cancel_draft,
    expire_drafts,
    get_active_draft,
    start_draft,
    update_draft,
)


class TestStartDraft(BaseTestCase):
    def test_new_draft_expires_after_ttl(self):
        before = timezone.now()

        draft = start_draft(self.user(), self.tenant(), self.event())

        assert draft.participant is None
        assert draft.participant_type is None
        assert before + timedelta(hours=24) <= draft.expires_at <= timezone.now() + timedelta(hours=24)

    def test_ttl_from_settings(self, settings):
        settings.DRAFT_TTL_HOURS = 1

        draft = start_draft(self.user(), self.tenant(), self.event())

        assert draft.expires_at <= timezone.now() + timedelta(hours=1)

    def test_replaces_previous_draft(self):
        old = self.create_draft()

        draft = start_draft(self.user(), self.tenant(), self.event())

        assert not Draft.objects.filter(pk=old.pk).exists()
        assert Draft.objects.filter(user=self.user()).get() == draft

    def test_prefilled_from_participant(self):
        invitation = self.create_invitation()
        participant = self.create_participant(
            invitation=invitation,
            request_for=RequestFor.OTHERS,
            passport_number="X1234567",
            needs_visa=True,
        )
        participant.meetings.add(self.closed_session())

        draft = start_draft(self.user(), self.tenant(), self.event(), participant=participant)

        assert draft.participant == participant
        assert draft.participant_type == participant.participant_type
        assert draft.invitation == invitation
        assert draft.family_name == participant.family_name
        assert draft.email == participant.email
        assert draft.passport_number == "X1234567"
        assert draft.needs_visa
        assert list(draft.meetings.all()) == [self.closed_session()]


class TestActiveDraft(BaseTestCase):
    def test_returns_draft(self):
        draft = self.create_draft()

        assert get_active_draft(self.user()) == draft

    def test_missing_draft(self):
        with pytest.raises(DraftNotFoundError):
            get_active_draft(self.user())

    def test_expired_draft(self):
        self.create_draft(expires_at=timezone.now() - timedelta(minutes=1))

        with pytest.raises(DraftNotFoundError):
            get_active_draft(self.user())


class TestUpdateDraft(BaseTestCase):
    def test_sets_fields_and_meetings(self):
        draft = self.create_draft()
        meeting = self.closed_session()

        update_draft(draft, first_name="Ada", needs_car_pass=True, meetings=[meeting])

        draft.refresh_from_db()
        assert draft.first_name == "Ada"
        assert draft.needs_car_pass
        assert list(draft.meetings.all()) == [meeting]

    def test_meetings_untouched_when_omitted(self):
        draft = self.create_draft()
        draft.meetings.add(self.closed_session())

        update_draft(draft, city="Rome")

        assert draft.meetings.count() == 1


class TestCancelDraft(BaseTestCase):
    def test_cancel(self):
        self.create_draft()

        assert cancel_draft(self.user()) is True
        assert not Draft.objects.filter(user=self.user()).exists()

    def test_cancel_without_draft(self):
        assert cancel_draft(self.user()) is False


class TestExpireDrafts(BaseTestCase):
    def test_deletes_only_expired(self):
        now = timezone.now()
        expired = self.create_draft(expires_at=now - timedelta(hours=1))
        active = self.create_draft(user=self.create_user(), expires_at=now + timedelta(hours=1))

        assert expire_drafts(now) == 1
        assert not Draft.objects.filter(pk=expired.pk).exists()
        assert Draft.objects.filter(pk=active.pk).exists()

    def test_nothing_to_expire(self):
        self.create_draft()

        assert expire_drafts() == 0

    def test_management_command(self):
        self.create_draft(expires_at=timezone.now() - timedelta(hours=1))
        out = StringIO()

        call_command("expire_drafts", stdout=out)

        assert "Deleted 1 expired drafts" in out.getvalue()
        assert Draft.objects.count() == 0
