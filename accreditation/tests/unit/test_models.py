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


import pytest

from accreditation.models.approval import Approval, ApprovalResult
from accreditation.models.registration import Constraint, Participant
from accreditation.models.workflow import Action, Step, Workflow
from accreditation.tests.unit.base import BaseTestCase
from accreditation.utils.core.exceptions import ApprovalImmutableError


class TestApproval(BaseTestCase):
    def create_approval(self):
        participant = self.create_participant()
        return Approval.objects.create(
            participant=participant,
            step=participant.step,
            user=self.user(),
            result=ApprovalResult.SUCCESS,
            remarks="Approved successfully.",
        )

    def test_cannot_be_modified(self):
        approval = self.create_approval()
        approval.remarks = "Changed"

        with pytest.raises(ApprovalImmutableError):
            approval.save()

        approval.refresh_from_db()
        assert approval.remarks == "Approved successfully."

    def test_cannot_be_deleted(self):
        approval = self.create_approval()

        with pytest.raises(ApprovalImmutableError):
            approval.delete()

        assert Approval.objects.filter(pk=approval.pk).exists()

    def test_latest_first(self):
        first = self.create_approval()
        second = Approval.objects.create(
            participant=first.participant,
            step=first.step,
            user=self.user(),
            result=ApprovalResult.FAILURE,
        )

        assert list(Approval.objects.filter(participant=first.participant)) == [second, first]


class TestWorkflowChain(BaseTestCase):
    def test_ordered_steps(self):
        workflow = self.create_workflow()

        names = [step.name for step in workflow.ordered_steps()]

        assert names == [
            "Request Received",
            "Review Request",
            "MOFA Approval",
            "Printing",
            "Notification",
            "Badge Collection",
        ]
        assert workflow.check_chain()

    def test_empty_workflow(self):
        workflow = self.create_workflow(step_names=())

        assert workflow.ordered_steps() == []
        assert workflow.check_chain()

    def test_cycle(self):
        workflow = self.create_workflow(step_names=(("A", Action.APPROVE), ("B", Action.APPROVE)))
        steps = {step.name: step for step in workflow.steps.all()}
        steps["B"].next_step = steps["A"]
        steps["B"].save()

        assert not workflow.check_chain()

    def test_two_terminals(self):
        workflow = self.create_workflow(step_names=(("A", Action.APPROVE), ("B", Action.APPROVE)))
        Step.objects.create(workflow=workflow, name="Loose", action=Action.APPROVE)

        assert not workflow.check_chain()

    def test_terminal_step(self):
        steps = self.steps()

        assert steps["Badge Collection"].is_terminal()
        assert not steps["Printing"].is_terminal()


class TestStepOrder(BaseTestCase):
    def test_orders_assigned_within_workflow(self):
        steps = self.steps()
        other = self.create_workflow(step_names=(("Only", Action.APPROVE),), name="Other")

        assert [steps[name].order for name in ("Request Received", "Review Request", "Badge Collection")] == [1, 2, 6]
        assert other.steps.get().order == 1

    def test_explicit_order_kept(self):
        workflow = Workflow.objects.create(event=self.event(), name="Manual")

        step = Step.objects.create(workflow=workflow, name="Gate", order=10)

        assert step.order == 10


class TestSoftDelete(BaseTestCase):
    def test_participant_soft_deleted(self):
        participant = self.create_participant()

        participant.delete()

        assert not Participant.objects.filter(pk=participant.pk).exists()
        assert Participant.all_objects.get(pk=participant.pk).deleted is not None

    def test_restriction_cascades_to_constraints(self):
        restriction = self.create_restriction([("Delegates", self.participant_type(), 3)])

        restriction.delete()

        assert not Constraint.objects.filter(restriction=restriction).exists()
        assert Constraint.all_objects.filter(restriction=restriction).count() == 1

    def test_closed_session_constraint(self):
        restriction = self.create_restriction(
            [("Closed Session", self.participant_type(), 2), ("Delegates", self.participant_type(), 3)]
        )

        flags = {constraint.name: constraint.is_closed_session() for constraint in restriction.constraints.all()}

        assert flags == {"Closed Session": True, "Delegates": False}
