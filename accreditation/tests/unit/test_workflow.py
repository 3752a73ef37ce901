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


from unittest.mock import patch

import pytest
from django.core import mail

from accreditation.models.approval import Approval, ApprovalResult
from accreditation.models.registration import Participant, RequestStatus
from accreditation.models.workflow import Action, Step
from accreditation.tests.unit.base import BaseTestCase
from accreditation.utils.core.exceptions import UnsupportedActionError
from accreditation.utils.workflow import (
    get_remarks_by_action,
    process_participant,
    record_approval,
    resolve_transition,
)


class TestApprovalRecorder(BaseTestCase):
    def test_default_remarks_per_action(self):
        assert get_remarks_by_action(Action.APPROVE) == "Approved successfully."
        assert get_remarks_by_action(Action.REJECT) == "Rejected due to compliance issues."
        assert get_remarks_by_action(Action.PRINT) == "Printed successfully."
        assert get_remarks_by_action(Action.NOTIFY) == "Notification sent successfully."
        assert get_remarks_by_action(Action.ARCHIVE) == "Archived successfully."
        assert get_remarks_by_action("OTHER") == "Action processed."

    def test_record_approval_on_current_step(self):
        participant = self.create_participant()

        approval = record_approval(participant, self.user().id, Action.APPROVE)

        assert approval.step_id == participant.step_id
        assert approval.result == ApprovalResult.SUCCESS
        assert approval.remarks == "Approved successfully."

    def test_record_rejection_is_failure(self):
        participant = self.create_participant()

        approval = record_approval(participant, self.user().id, Action.REJECT, "Missing passport")

        assert approval.result == ApprovalResult.FAILURE
        assert approval.remarks == "Missing passport"

    def test_empty_remarks_are_kept(self):
        participant = self.create_participant()

        approval = record_approval(participant, self.user().id, Action.PRINT, "")

        assert approval.remarks == ""


class TestTransitionResolver(BaseTestCase):
    def test_approve_follows_next_step(self):
        participant = self.create_participant()

        next_step, status = resolve_transition(participant, Action.APPROVE)

        assert next_step == self.steps()["Review Request"]
        assert status == RequestStatus.INPROGRESS

    def test_resolve_does_not_write(self):
        participant = self.create_participant()

        resolve_transition(participant, Action.APPROVE)

        participant.refresh_from_db()
        assert participant.step == self.steps()["Request Received"]
        assert participant.status == RequestStatus.PENDING

    def test_approve_at_terminal_step_is_noop(self):
        participant = self.create_participant(step=self.steps()["Badge Collection"])

        assert resolve_transition(participant, Action.APPROVE) is None

    def test_press_branch_in_same_workflow(self):
        steps = self.steps()
        broadcast = Step.objects.create(workflow=steps["Review Request"].workflow, name="ET Broadcast Approval")
        participant = self.create_participant(
            step=steps["Review Request"],
            participant_type=self.participant_type("Press / Media"),
        )

        next_step, status = resolve_transition(participant, Action.APPROVE)

        assert next_step == broadcast
        assert status == RequestStatus.INPROGRESS

    def test_press_branch_found_in_other_workflow(self, caplog):
        steps = self.steps()
        other_event = self.create_event(name="Other")
        other_workflow = self.create_workflow(
            event=other_event,
            step_names=(("ET Broadcast Approval", Action.APPROVE),),
        )
        participant = self.create_participant(
            step=steps["Review Request"],
            participant_type=self.participant_type("Press / Media"),
        )

        with caplog.at_level("WARNING", logger="accreditation.utils.workflow"):
            next_step, _status = resolve_transition(participant, Action.APPROVE)

        assert next_step.workflow == other_workflow
        assert "found outside workflow" in caplog.text

    def test_press_branch_without_target_is_noop(self):
        participant = self.create_participant(
            step=self.steps()["Review Request"],
            participant_type=self.participant_type("Press / Media"),
        )

        assert resolve_transition(participant, Action.APPROVE) is None

    def test_press_elsewhere_follows_next_step(self):
        participant = self.create_participant(participant_type=self.participant_type("Press / Media"))

        next_step, _status = resolve_transition(participant, Action.APPROVE)

        assert next_step == self.steps()["Review Request"]

    def test_reject_goes_to_checkpoint(self):
        participant = self.create_participant(step=self.steps()["Printing"])

        next_step, status = resolve_transition(participant, Action.REJECT)

        assert next_step == self.steps()["MOFA Approval"]
        assert status == RequestStatus.REJECTED

    def test_reject_without_checkpoint_is_noop(self):
        workflow = self.create_workflow(
            event=self.create_event(name="Forum"),
            step_names=(("Request Received", Action.APPROVE), ("Review Request", Action.APPROVE)),
        )
        participant = self.create_participant(step=workflow.steps.get(name="Review Request"))

        assert resolve_transition(participant, Action.REJECT) is None

    def test_reject_checkpoint_from_settings(self, settings):
        settings.WORKFLOW_ROUTING = {"reject_checkpoint": "Review Request"}
        participant = self.create_participant(step=self.steps()["Printing"])

        next_step, _status = resolve_transition(participant, Action.REJECT)

        assert next_step == self.steps()["Review Request"]

    def test_print_and_notify_advance(self):
        printing = self.create_participant(step=self.steps()["Printing"])
        notification = self.create_participant(step=self.steps()["Notification"])

        assert resolve_transition(printing, Action.PRINT) == (self.steps()["Notification"], RequestStatus.PRINTED)
        assert resolve_transition(notification, Action.NOTIFY) == (
            self.steps()["Badge Collection"],
            RequestStatus.NOTIFIED,
        )

    def test_print_at_terminal_step_is_noop(self):
        participant = self.create_participant(step=self.steps()["Badge Collection"])

        assert resolve_transition(participant, Action.PRINT) is None
        assert resolve_transition(participant, Action.NOTIFY) is None

    def test_archive_stays_on_step(self):
        participant = self.create_participant(step=self.steps()["Badge Collection"])

        assert resolve_transition(participant, Action.ARCHIVE) == (
            self.steps()["Badge Collection"],
            RequestStatus.ARCHIVED,
        )

    def test_unsupported_action(self):
        participant = self.create_participant()

        with pytest.raises(UnsupportedActionError):
            resolve_transition(participant, "ESCALATE")


class TestProcessParticipant(BaseTestCase):
    def test_approve_moves_participant(self):
        participant = self.create_participant()

        transition = process_participant(participant.id, self.user().id, Action.APPROVE)

        participant.refresh_from_db()
        assert transition == (self.steps()["Review Request"], RequestStatus.INPROGRESS)
        assert participant.step == self.steps()["Review Request"]
        assert participant.status == RequestStatus.INPROGRESS

        approval = Approval.objects.get(participant=participant)
        assert approval.step == self.steps()["Request Received"]
        assert approval.remarks == "Approved successfully."

    def test_action_as_plain_string(self):
        participant = self.create_participant()

        process_participant(participant.id, self.user().id, "APPROVE", "Looks fine")

        assert Approval.objects.get(participant=participant).remarks == "Looks fine"

    def test_noop_still_records_approval(self):
        participant = self.create_participant(step=self.steps()["Badge Collection"])

        assert process_participant(participant.id, self.user().id, Action.APPROVE) is None

        participant.refresh_from_db()
        assert participant.step == self.steps()["Badge Collection"]
        assert participant.status == RequestStatus.PENDING
        assert Approval.objects.filter(participant=participant).count() == 1

    def test_unsupported_action_records_nothing(self):
        participant = self.create_participant()

        with pytest.raises(UnsupportedActionError):
            process_participant(participant.id, self.user().id, "ESCALATE")

        assert not Approval.objects.filter(participant=participant).exists()

    def test_missing_participant(self):
        with pytest.raises(Participant.DoesNotExist):
            process_participant(999999, self.user().id, Action.APPROVE)

    def test_reject_sends_rejection_mail(self):
        participant = self.create_participant(step=self.steps()["Printing"])

        process_participant(participant.id, self.user().id, Action.REJECT)

        participant.refresh_from_db()
        assert participant.status == RequestStatus.REJECTED
        assert participant.step == self.steps()["MOFA Approval"]
        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject == "Request Rejected"
        assert mail.outbox[0].to == [participant.email]
        assert Approval.objects.get(participant=participant).result == ApprovalResult.FAILURE

    def test_noop_reject_sends_no_mail(self):
        workflow = self.create_workflow(
            event=self.create_event(name="Forum"),
            step_names=(("Request Received", Action.APPROVE),),
        )
        participant = self.create_participant(step=workflow.steps.get())

        process_participant(participant.id, self.user().id, Action.REJECT)

        assert len(mail.outbox) == 0

    def test_archive_sends_finalized_mail(self):
        participant = self.create_participant(step=self.steps()["Badge Collection"])

        process_participant(participant.id, self.user().id, Action.ARCHIVE)

        participant.refresh_from_db()
        assert participant.status == RequestStatus.ARCHIVED
        assert [message.subject for message in mail.outbox] == ["Request Finalized"]

    def test_mail_failure_keeps_transition(self):
        participant = self.create_participant(step=self.steps()["Printing"])

        with patch("accreditation.mail.workflow.send_notification", side_effect=RuntimeError("smtp down")):
            transition = process_participant(participant.id, self.user().id, Action.REJECT)

        participant.refresh_from_db()
        assert transition is not None
        assert participant.status == RequestStatus.REJECTED

    def test_full_walk_through_workflow(self):
        participant = self.create_participant()
        user_id = self.user().id

        for action in (Action.APPROVE, Action.APPROVE, Action.APPROVE, Action.PRINT, Action.NOTIFY, Action.ARCHIVE):
            process_participant(participant.id, user_id, action)

        participant.refresh_from_db()
        assert participant.step == self.steps()["Badge Collection"]
        assert participant.status == RequestStatus.ARCHIVED
        assert Approval.objects.filter(participant=participant).count() == 6
