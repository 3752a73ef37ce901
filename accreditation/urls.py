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


from django.urls import (
    path,
)

from accreditation.views import requests as views_requests

urlpatterns = [
    path(
        "requests/<int:participant_id>/process/",
        views_requests.participant_process,
        name="participant_process",
    ),
    path(
        "requests/submit/",
        views_requests.registration_submit,
        name="registration_submit",
    ),
    path(
        "requests/cancel/",
        views_requests.registration_cancel,
        name="registration_cancel",
    ),
]
