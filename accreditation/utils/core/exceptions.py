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

from typing import Any


class UnsupportedActionError(Exception):
    """Exception raised when the workflow engine receives an action it cannot handle.

    Attributes:
        action: The offending action value

    """

    def __init__(self, action: Any) -> None:
        """Initialize with the rejected action value."""
        super().__init__(f"Unsupported action: {action}")
        self.action = action


class CodeGenerationError(Exception):
    """Exception raised when no unique registration code could be generated.

    Attributes:
        attempts (int): Number of attempts made before giving up

    """

    def __init__(self, attempts: int) -> None:
        """Initialize with the number of attempts."""
        super().__init__("Could not generate unique registration code")
        self.attempts = attempts


class QuotaExceededError(Exception):
    """Exception raised when a registration would exceed an invitation or constraint quota.

    Attributes:
        invitation_id (int, optional): Invitation whose quota is exhausted
        participant_type_id (int, optional): Participant type requested

    """

    def __init__(self, invitation_id: int | None = None, participant_type_id: int | None = None) -> None:
        """Initialize with the invitation and participant type involved."""
        super().__init__("Maximum quota reached for this invitation")
        self.invitation_id = invitation_id
        self.participant_type_id = participant_type_id


class DraftNotFoundError(Exception):
    """Exception raised when a user has no active registration draft."""


class ApprovalImmutableError(Exception):
    """Exception raised on any attempt to change or delete an approval record."""
