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


import re
import threading
from datetime import date
from unittest.mock import patch

import pytest
from django.core import mail
from django.core.exceptions import ValidationError
from django.db import connection

from accreditation.models.approval import Approval
from accreditation.models.draft import Draft
from accreditation.models.event import Event
from accreditation.models.registration import Participant, RequestFor, RequestStatus
from accreditation.tests.unit.base import BaseTestCase
from accreditation.utils.core.exceptions import CodeGenerationError, QuotaExceededError
from accreditation.utils.registration import (
    create_registration_code,
    generate_registration_code,
    get_initial_step,
    submit_registration,
)


class TestRegistrationCode(BaseTestCase):
    def test_code_format(self):
        code = create_registration_code(self.event(), self.participant_type("Delegate"))

        assert re.fullmatch(r"SUM-DE-25-\d{6}", code)

    def test_code_fallback_prefixes(self):
        event = Event(name="", start_date=date(2026, 5, 1))

        code = create_registration_code(event, None)

        assert re.fullmatch(r"EVT-PT-26-\d{6}", code)

    def test_short_names(self):
        event = Event(name="ab", start_date=date(2030, 1, 1))

        code = create_registration_code(event, self.participant_type("X"))

        assert code.startswith("AB-X-30-")

    def test_generate_retries_on_collision(self):
        taken = self.create_participant(registration_code="SUM-DE-25-000001")

        with patch(
            "accreditation.utils.registration.create_registration_code",
            side_effect=[taken.registration_code, taken.registration_code, "SUM-DE-25-000002"],
        ) as mock_create:
            code = generate_registration_code(self.event(), self.participant_type())

        assert code == "SUM-DE-25-000002"
        assert mock_create.call_count == 3

    def test_generate_gives_up(self):
        taken = self.create_participant(registration_code="SUM-DE-25-000001")

        with patch(
            "accreditation.utils.registration.create_registration_code",
            return_value=taken.registration_code,
        ) as mock_create:
            with pytest.raises(CodeGenerationError) as exc_info:
                generate_registration_code(self.event(), self.participant_type())

        assert mock_create.call_count == 5
        assert exc_info.value.attempts == 5
        assert str(exc_info.value) == "Could not generate unique registration code"

    def test_soft_deleted_codes_stay_taken(self):
        taken = self.create_participant(registration_code="SUM-DE-25-000001")
        taken.delete()

        with patch(
            "accreditation.utils.registration.create_registration_code",
            side_effect=[taken.registration_code, "SUM-DE-25-000003"],
        ):
            assert generate_registration_code(self.event(), self.participant_type()) == "SUM-DE-25-000003"


class TestInitialStep(BaseTestCase):
    def test_prefers_workflow_of_type(self):
        self.steps()
        press = self.participant_type("Press / Media")
        press_workflow = self.create_workflow(participant_type=press, name="Press")

        step = get_initial_step(self.event(), press)

        assert step.workflow == press_workflow
        assert step.name == "Request Received"

    def test_generic_workflow(self):
        steps = self.steps()

        assert get_initial_step(self.event(), self.participant_type()) == steps["Request Received"]


class TestSubmitRegistration(BaseTestCase):
    def test_creates_participant_and_reviews_it(self):
        self.steps()
        draft = self.create_draft(request_for=RequestFor.OTHERS)

        participant = submit_registration(draft, self.user())

        assert participant.email == draft.email
        assert participant.family_name == draft.family_name
        assert participant.step == self.steps()["MOFA Approval"]
        assert participant.status == RequestStatus.INPROGRESS
        assert re.fullmatch(r"SUM-DE-25-\d{6}", participant.registration_code)
        assert not Draft.objects.filter(pk=draft.pk).exists()

        remarks = list(Approval.objects.filter(participant=participant).order_by("id").values_list("remarks", flat=True))
        assert remarks == ["Initial Request Received", "Initial Request Reviewed"]

        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject == "Event Registration Code"
        assert participant.registration_code in mail.outbox[0].body

    def test_myself_uses_account_email(self):
        self.steps()
        draft = self.create_draft(request_for=RequestFor.MYSELF, email="other@example.com")

        participant = submit_registration(draft, self.user())

        assert participant.email == self.user().email

    def test_invitation_organization_wins(self):
        self.steps()
        invitation = self.create_invitation(organization="Ministry")
        draft = self.create_draft(request_for=RequestFor.OTHERS, invitation=invitation, organization="Typo")

        participant = submit_registration(draft, self.user())

        assert participant.organization == "Ministry"
        assert participant.invitation == invitation

    def test_copies_wishlist(self):
        self.steps()
        draft = self.create_draft(request_for=RequestFor.OTHERS)
        draft.meetings.add(self.closed_session())

        participant = submit_registration(draft, self.user())

        assert list(participant.meetings.all()) == [self.closed_session()]

    def test_update_keeps_registration_code(self):
        steps = self.steps()
        existing = self.create_participant(step=steps["Printing"], status=RequestStatus.PRINTED)
        draft = self.create_draft(request_for=RequestFor.OTHERS, participant=existing, email=existing.email)

        participant = submit_registration(draft, self.user())

        assert participant.pk == existing.pk
        assert participant.registration_code == existing.registration_code
        remarks = list(Approval.objects.filter(participant=participant).order_by("id").values_list("remarks", flat=True))
        assert remarks == ["Updated Request Received", "Updated Request Reviewed"]

    def test_invitation_quota_exceeded(self):
        self.steps()
        invitation = self.create_invitation(maximum_quota=1)
        self.create_participant(invitation=invitation)
        draft = self.create_draft(request_for=RequestFor.OTHERS, invitation=invitation)

        with pytest.raises(QuotaExceededError) as exc_info:
            submit_registration(draft, self.user())

        assert exc_info.value.invitation_id == invitation.pk
        assert Draft.objects.filter(pk=draft.pk).exists()
        assert Participant.objects.filter(invitation=invitation).count() == 1
        assert len(mail.outbox) == 0

    def test_type_constraint_exceeded(self):
        self.steps()
        delegate = self.participant_type()
        restriction = self.create_restriction([("Delegates", delegate, 1)])
        invitation = self.create_invitation(restriction=restriction)
        self.create_participant(participant_type=delegate)
        draft = self.create_draft(request_for=RequestFor.OTHERS, invitation=invitation)

        with pytest.raises(QuotaExceededError):
            submit_registration(draft, self.user())

    def test_second_submission_hits_quota(self):
        self.steps()
        invitation = self.create_invitation(maximum_quota=1)
        first = self.create_draft(request_for=RequestFor.OTHERS, invitation=invitation)
        other_user = self.create_user()
        second = self.create_draft(user=other_user, request_for=RequestFor.OTHERS, invitation=invitation)

        submit_registration(first, self.user())
        with pytest.raises(QuotaExceededError):
            submit_registration(second, other_user)

        assert Participant.objects.filter(invitation=invitation).count() == 1

    def test_missing_required_data(self):
        self.steps()
        draft = self.create_draft(request_for=RequestFor.OTHERS, title="", date_of_birth=None, city="")

        with pytest.raises(ValidationError) as exc_info:
            submit_registration(draft, self.user())

        assert exc_info.value.messages == [
            "Title is required",
            "Date of birth is required",
            "City is required",
        ]
        assert Draft.objects.filter(pk=draft.pk).exists()
        assert not Participant.objects.exists()

    def test_missing_participant_type(self):
        draft = self.create_draft(participant_type=None)

        with pytest.raises(ValidationError):
            submit_registration(draft, self.user())

    def test_type_quota_shared_across_invitations(self):
        self.steps()
        delegate = self.participant_type()
        restriction = self.create_restriction([("Delegates", delegate, 1)])
        first_focal = self.create_focal_user()
        second_focal = self.create_focal_user()
        first = self.create_invitation(user=first_focal, organization="Acme", restriction=restriction)
        second = self.create_invitation(user=second_focal, organization="Acme", restriction=restriction)

        submit_registration(
            self.create_draft(user=first_focal, request_for=RequestFor.OTHERS, invitation=first),
            first_focal,
        )
        with pytest.raises(QuotaExceededError):
            submit_registration(
                self.create_draft(user=second_focal, request_for=RequestFor.OTHERS, invitation=second),
                second_focal,
            )

        assert Participant.objects.filter(organization="Acme").count() == 1

    def test_mail_failure_does_not_block_submission(self):
        self.steps()
        draft = self.create_draft(request_for=RequestFor.OTHERS)

        with patch("accreditation.mail.workflow.send_notification", side_effect=RuntimeError("smtp down")):
            participant = submit_registration(draft, self.user())

        assert participant.step == self.steps()["MOFA Approval"]


@pytest.mark.skipif(connection.vendor != "postgresql", reason="row locks need PostgreSQL")
class TestConcurrentSubmission(BaseTestCase):
    @pytest.mark.django_db(transaction=True)
    def test_quota_of_one_admits_one(self):
        self.steps()
        invitation = self.create_invitation(maximum_quota=1)
        users = [self.user(), self.create_user()]
        drafts = [self.create_draft(user=user, request_for=RequestFor.OTHERS, invitation=invitation) for user in users]

        barrier = threading.Barrier(len(drafts))
        outcomes = []

        def submit(draft, user):
            barrier.wait()
            try:
                submit_registration(draft, user)
                outcomes.append("ok")
            except QuotaExceededError:
                outcomes.append("quota")
            finally:
                connection.close()

        threads = [threading.Thread(target=submit, args=pair) for pair in zip(drafts, users)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["ok", "quota"]
        assert Participant.objects.filter(invitation=invitation).count() == 1

    @pytest.mark.django_db(transaction=True)
    def test_type_quota_of_one_admits_one_across_invitations(self):
        self.steps()
        delegate = self.participant_type()
        restriction = self.create_restriction([("Delegates", delegate, 1)])
        users = [self.create_focal_user(), self.create_focal_user()]
        drafts = [
            self.create_draft(
                user=user,
                request_for=RequestFor.OTHERS,
                invitation=self.create_invitation(user=user, organization="Acme", restriction=restriction),
            )
            for user in users
        ]

        barrier = threading.Barrier(len(drafts))
        outcomes = []

        def submit(draft, user):
            barrier.wait()
            try:
                submit_registration(draft, user)
                outcomes.append("ok")
            except QuotaExceededError:
                outcomes.append("quota")
            finally:
                connection.close()

        threads = [threading.Thread(target=submit, args=pair) for pair in zip(drafts, users)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["ok", "quota"]
        assert Participant.objects.filter(organization="Acme", participant_type=delegate).count() == 1
