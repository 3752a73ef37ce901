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

"""Participant approval workflow.

An approver's action on a participant is first recorded as an immutable
approval, then resolved into the participant's next step and status:

- APPROVE follows the step's next step, or a routing branch for a given
  participant type and step name, and marks the participant INPROGRESS.
- REJECT sends the participant back to the workflow's rejection checkpoint.
- PRINT and NOTIFY advance to the next step marking PRINTED / NOTIFIED.
- ARCHIVE closes the request in place.

Named steps that cannot be found make the action a no-op; any action outside
the supported ones raises UnsupportedActionError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.conf import settings as conf_settings
from django.db import transaction

from accreditation.mail.workflow import send_finalized_email, send_rejection_email
from accreditation.models.approval import Approval, ApprovalResult
from accreditation.models.registration import Participant, RequestStatus
from accreditation.models.workflow import Action, Step
from accreditation.utils.core.exceptions import UnsupportedActionError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

PRESS_MEDIA_TYPE = "Press / Media"
REVIEW_REQUEST_STEP = "Review Request"
ET_BROADCAST_APPROVAL_STEP = "ET Broadcast Approval"
MOFA_APPROVAL_STEP = "MOFA Approval"
REQUEST_RECEIVED_STEP = "Request Received"

# Name-addressed edges of the workflow graph, on top of the next step links
DEFAULT_WORKFLOW_ROUTING = {
    "approve_branches": [
        {
            "participant_type": PRESS_MEDIA_TYPE,
            "from_step": REVIEW_REQUEST_STEP,
            "to_step": ET_BROADCAST_APPROVAL_STEP,
        },
    ],
    "reject_checkpoint": MOFA_APPROVAL_STEP,
    "initial_step": REQUEST_RECEIVED_STEP,
}

DEFAULT_REMARKS = {
    Action.APPROVE: "Approved successfully.",
    Action.REJECT: "Rejected due to compliance issues.",
    Action.PRINT: "Printed successfully.",
    Action.NOTIFY: "Notification sent successfully.",
    Action.ARCHIVE: "Archived successfully.",
}

Transition = tuple[Step, str]


def get_workflow_routing() -> dict[str, Any]:
    """Return the routing configuration, settings overriding the defaults key by key."""
    return {**DEFAULT_WORKFLOW_ROUTING, **getattr(conf_settings, "WORKFLOW_ROUTING", {})}


def get_remarks_by_action(action: str) -> str:
    return DEFAULT_REMARKS.get(action, "Action processed.")


def coerce_action(action: Any) -> Action:
    """Convert a raw value to an Action.

    Raises:
        UnsupportedActionError: If the value is not one of the supported actions

    """
    try:
        return Action(action)
    except ValueError as err:
        raise UnsupportedActionError(action) from err


def record_approval(participant: Participant, user_id: int, action: str, remarks: str | None = None) -> Approval:
    """Append the audit record of an action taken on the participant's current step.

    The record is committed on its own, so it survives a failure of the
    transition that follows it.

    Args:
        participant: Participant snapshot including the current step
        user_id: User taking the action
        action: One of the Action values
        remarks: Free text, defaults to a fixed sentence per action

    Returns:
        Approval: The inserted record

    """
    with transaction.atomic():
        approval = Approval.objects.create(
            participant_id=participant.id,
            step_id=participant.step_id,
            user_id=user_id,
            result=ApprovalResult.FAILURE if action == Action.REJECT else ApprovalResult.SUCCESS,
            remarks=remarks if remarks is not None else get_remarks_by_action(action),
        )
    logger.debug("Recorded %s approval %s for participant %s", action, approval.pk, participant.pk)
    return approval


def find_step_by_name(name: str, workflow_id: int | None = None, action: str | None = None) -> Step | None:
    """Look up a step by name, optionally scoped to a workflow and an action."""
    queryset = Step.objects.filter(name=name)
    if workflow_id is not None:
        queryset = queryset.filter(workflow_id=workflow_id)
    if action is not None:
        queryset = queryset.filter(action=action)
    return queryset.order_by("order", "id").first()


def determine_next_step(participant: Participant) -> Step | None:
    """Resolve the step an approval leads to.

    Routing branches match the participant type name and the current step
    name exactly; the branch target is searched in the participant's workflow
    first and then among all workflows. Without a matching branch the step's
    next step is used.
    """
    current_step = participant.step
    for branch in get_workflow_routing()["approve_branches"]:
        if participant.participant_type.name != branch["participant_type"]:
            continue
        if current_step.name != branch["from_step"]:
            continue

        target = find_step_by_name(branch["to_step"], workflow_id=current_step.workflow_id)
        if target is None:
            target = find_step_by_name(branch["to_step"])
            if target is not None:
                logger.warning(
                    "Step '%s' found outside workflow %s for participant %s",
                    branch["to_step"],
                    current_step.workflow_id,
                    participant.pk,
                )
        return target

    return current_step.next_step


def _resolve_approve(participant: Participant) -> Transition | None:
    next_step = determine_next_step(participant)
    if next_step is None:
        return None
    return next_step, RequestStatus.INPROGRESS


def _resolve_reject(participant: Participant) -> Transition | None:
    checkpoint = find_step_by_name(
        get_workflow_routing()["reject_checkpoint"],
        workflow_id=participant.step.workflow_id,
        action=Action.APPROVE,
    )
    if checkpoint is None:
        return None
    return checkpoint, RequestStatus.REJECTED


def _resolve_print(participant: Participant) -> Transition | None:
    next_step = participant.step.next_step
    if next_step is None:
        return None
    return next_step, RequestStatus.PRINTED


def _resolve_notify(participant: Participant) -> Transition | None:
    next_step = participant.step.next_step
    if next_step is None:
        return None
    return next_step, RequestStatus.NOTIFIED


def _resolve_archive(participant: Participant) -> Transition | None:
    return participant.step, RequestStatus.ARCHIVED


RESOLVERS: dict[str, Callable[[Participant], Transition | None]] = {
    Action.APPROVE: _resolve_approve,
    Action.REJECT: _resolve_reject,
    Action.PRINT: _resolve_print,
    Action.NOTIFY: _resolve_notify,
    Action.ARCHIVE: _resolve_archive,
}

# Notifications sent once the transition is persisted
NOTIFIERS: dict[str, Callable[[Participant], None]] = {
    Action.REJECT: send_rejection_email,
    Action.ARCHIVE: send_finalized_email,
}


def resolve_transition(participant: Participant, action: Any) -> Transition | None:
    """Compute the next step and status for an action, without writing anything.

    Args:
        participant: Participant with its current step and type
        action: Action value to apply

    Returns:
        A (next_step, next_status) tuple, or None when the action is a no-op

    Raises:
        UnsupportedActionError: If the action is not supported

    """
    resolver = RESOLVERS.get(coerce_action(action))
    if resolver is None:
        raise UnsupportedActionError(action)
    return resolver(participant)


def apply_transition(participant: Participant, next_step: Step, next_status: str) -> None:
    """Persist the new step and status of the participant."""
    with transaction.atomic():
        locked = Participant.objects.select_for_update().get(pk=participant.pk)
        locked.step = next_step
        locked.status = next_status
        locked.save(update_fields=["step", "status", "updated"])

    participant.step = next_step
    participant.status = next_status


def notify_participant(participant: Participant, action: str) -> None:
    """Send the notification bound to an action, never failing the transition."""
    notifier = NOTIFIERS.get(action)
    if notifier is None:
        return
    try:
        notifier(participant)
    except Exception:
        logger.exception("Notification for %s failed for participant %s", action, participant.pk)


def process_participant(
    participant_id: int,
    user_id: int,
    action: Any,
    remarks: str | None = None,
) -> Transition | None:
    """Apply an approver's action to a participant.

    Args:
        participant_id: Participant to move through the workflow
        user_id: User taking the action
        action: One of the Action values
        remarks: Optional remarks stored on the approval

    Returns:
        The applied (step, status) transition, or None for a no-op

    Raises:
        UnsupportedActionError: If the action is not supported
        Participant.DoesNotExist: If the participant does not exist

    """
    action = coerce_action(action)
    participant = Participant.objects.select_related(
        "step",
        "step__next_step",
        "participant_type",
        "event",
    ).get(pk=participant_id)

    record_approval(participant, user_id, action, remarks)

    transition = resolve_transition(participant, action)
    if transition is None:
        logger.debug("No transition for %s on participant %s at step %s", action, participant.pk, participant.step)
        return None

    next_step, next_status = transition
    apply_transition(participant, next_step, next_status)
    logger.info("Participant %s moved to step '%s' with status %s", participant.pk, next_step.name, next_status)

    notify_participant(participant, action)
    return transition
