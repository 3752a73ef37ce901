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


from django.core.management.base import BaseCommand

from accreditation.utils.drafts import expire_drafts
from accreditation.utils.tasks import mail_error


class Command(BaseCommand):
    """Django management command deleting expired registration drafts.

    Meant to be scheduled periodically, e.g. hourly via cron.
    """

    help = "Delete expired registration drafts"

    def handle(self, *args, **options):
        try:
            self.go()
        except Exception as e:
            mail_error("Expire drafts", "", e)
            raise

    def go(self) -> None:
        count = expire_drafts()
        self.stdout.write(f"Deleted {count} expired drafts")
