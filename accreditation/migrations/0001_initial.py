import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import phonenumber_field.modelfields
from django.conf import settings
from django.db import migrations, models


def base_fields():
    return [
        ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("deleted", models.DateTimeField(db_index=True, editable=False, null=True)),
        ("deleted_by_cascade", models.BooleanField(default=False, editable=False)),
        ("created", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ("updated", models.DateTimeField(auto_now=True)),
    ]


def applicant_fields(model_name):
    return [
        (
            "request_for",
            models.CharField(
                choices=[("MYSELF", "Myself"), ("OTHERS", "Others")],
                default="MYSELF",
                max_length=10,
            ),
        ),
        ("gender", models.CharField(blank=True, choices=[("m", "Male"), ("f", "Female")], max_length=1)),
        ("title", models.CharField(blank=True, max_length=20)),
        ("first_name", models.CharField(blank=True, max_length=100, verbose_name="First name")),
        ("family_name", models.CharField(blank=True, max_length=100, verbose_name="Family name")),
        ("date_of_birth", models.DateField(blank=True, null=True)),
        ("nationality", models.CharField(blank=True, max_length=100)),
        ("passport_number", models.CharField(blank=True, max_length=50)),
        ("passport_expiry", models.DateField(blank=True, null=True)),
        ("email", models.EmailField(blank=True, max_length=254)),
        ("organization", models.CharField(blank=True, max_length=200)),
        ("job_title", models.CharField(blank=True, max_length=100)),
        ("country", models.CharField(blank=True, max_length=100)),
        ("city", models.CharField(blank=True, max_length=100)),
        ("website", models.URLField(blank=True)),
        ("telephone", phonenumber_field.modelfields.PhoneNumberField(blank=True, max_length=128, region=None)),
        ("address", models.CharField(blank=True, max_length=500)),
        ("preferred_language", models.CharField(blank=True, max_length=10)),
        ("needs_visa", models.BooleanField(default=False)),
        ("needs_car_pass", models.BooleanField(default=False)),
        ("vehicle_type", models.CharField(blank=True, max_length=50)),
        ("vehicle_plate_number", models.CharField(blank=True, max_length=20)),
        ("needs_car_from_organizer", models.BooleanField(default=False)),
        ("flight_number", models.CharField(blank=True, max_length=20)),
        ("arrival_date", models.DateField(blank=True, null=True)),
        (
            "meetings",
            models.ManyToManyField(
                blank=True,
                related_name=f"{model_name}_wishlists",
                to="accreditation.meetingtype",
            ),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Tenant",
            fields=[
                *base_fields(),
                ("name", models.CharField(help_text="Complete name of the organization", max_length=100)),
                (
                    "slug",
                    models.CharField(
                        db_index=True,
                        max_length=20,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^[0-9a-z_-]*$",
                                "Only characters allowed are: 0-9, a-z, _, -.",
                            ),
                        ],
                        verbose_name="URL identifier",
                    ),
                ),
                (
                    "email",
                    models.EmailField(
                        blank=True,
                        help_text="(Optional) Contact address used as sender for communications",
                        max_length=254,
                        null=True,
                    ),
                ),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("website", models.URLField(blank=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                *base_fields(),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True, default="", max_length=5000)),
                ("venue", models.CharField(blank=True, help_text="Where it is held", max_length=500)),
                ("start_date", models.DateField(verbose_name="Start date")),
                ("end_date", models.DateField(verbose_name="End date")),
                (
                    "status",
                    models.CharField(
                        choices=[("DRAFT", "Draft"), ("PUBLISHED", "Published"), ("CLOSED", "Closed")],
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="accreditation.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["start_date"],
            },
        ),
        migrations.CreateModel(
            name="MeetingType",
            fields=[
                *base_fields(),
                ("name", models.CharField(max_length=100)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="meeting_types",
                        to="accreditation.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="ParticipantType",
            fields=[
                *base_fields(),
                (
                    "name",
                    models.CharField(help_text="Classification, e.g. Delegate or Press / Media", max_length=100),
                ),
                ("description", models.CharField(blank=True, max_length=500)),
                ("priority", models.IntegerField(default=0, help_text="Higher values are listed first")),
                ("is_exempted", models.BooleanField(default=False, help_text="Exempted from quota checks")),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participant_types",
                        to="accreditation.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-priority", "name"],
            },
        ),
        migrations.CreateModel(
            name="Role",
            fields=[
                *base_fields(),
                ("name", models.CharField(max_length=100)),
                (
                    "members",
                    models.ManyToManyField(
                        blank=True,
                        related_name="accreditation_roles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="roles",
                        to="accreditation.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Workflow",
            fields=[
                *base_fields(),
                ("name", models.CharField(max_length=100)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="workflows",
                        to="accreditation.event",
                    ),
                ),
                (
                    "participant_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="workflows",
                        to="accreditation.participanttype",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Step",
            fields=[
                *base_fields(),
                ("order", models.IntegerField(default=0)),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, max_length=500)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("APPROVE", "Approve"),
                            ("REJECT", "Reject"),
                            ("PRINT", "Print"),
                            ("NOTIFY", "Notify"),
                            ("ARCHIVE", "Archive"),
                        ],
                        default="APPROVE",
                        max_length=10,
                    ),
                ),
                (
                    "next_step",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="previous_steps",
                        to="accreditation.step",
                    ),
                ),
                (
                    "role",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="steps",
                        to="accreditation.role",
                    ),
                ),
                (
                    "workflow",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="steps",
                        to="accreditation.workflow",
                    ),
                ),
            ],
            options={
                "ordering": ["workflow", "order"],
            },
        ),
        migrations.CreateModel(
            name="Restriction",
            fields=[
                *base_fields(),
                ("name", models.CharField(max_length=100)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="restrictions",
                        to="accreditation.event",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="restrictions",
                        to="accreditation.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Constraint",
            fields=[
                *base_fields(),
                ("name", models.CharField(max_length=100)),
                ("quota", models.IntegerField(help_text="Maximum number of participants")),
                (
                    "access_level",
                    models.CharField(
                        choices=[("OPEN", "Open"), ("CLOSED", "Closed")],
                        default="OPEN",
                        max_length=10,
                    ),
                ),
                (
                    "participant_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="constraints",
                        to="accreditation.participanttype",
                    ),
                ),
                (
                    "restriction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="constraints",
                        to="accreditation.restriction",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Invitation",
            fields=[
                *base_fields(),
                ("email", models.EmailField(max_length=254)),
                ("organization", models.CharField(max_length=200)),
                (
                    "maximum_quota",
                    models.IntegerField(
                        blank=True,
                        help_text="Optional - Maximum number of participants for this organization",
                        null=True,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invitations",
                        to="accreditation.event",
                    ),
                ),
                (
                    "participant_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invitations",
                        to="accreditation.participanttype",
                    ),
                ),
                (
                    "restriction",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invitations",
                        to="accreditation.restriction",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invitations",
                        to="accreditation.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["organization"],
            },
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                *base_fields(),
                *applicant_fields("participant"),
                (
                    "registration_code",
                    models.CharField(max_length=30, unique=True, verbose_name="Registration code"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("INPROGRESS", "In progress"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("CANCELLED", "Cancelled"),
                            ("PRINTED", "Printed"),
                            ("NOTIFIED", "Notified"),
                            ("ARCHIVED", "Archived"),
                            ("BYPASSED", "Bypassed"),
                        ],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="accreditation.event",
                    ),
                ),
                (
                    "invitation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="participants",
                        to="accreditation.invitation",
                    ),
                ),
                (
                    "participant_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="participants",
                        to="accreditation.participanttype",
                    ),
                ),
                (
                    "step",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="participants",
                        to="accreditation.step",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="accreditation.tenant",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
            },
        ),
        migrations.CreateModel(
            name="Approval",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "result",
                    models.CharField(choices=[("SUCCESS", "Success"), ("FAILURE", "Failure")], max_length=10),
                ),
                ("remarks", models.TextField(blank=True, max_length=2000)),
                ("created", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approvals",
                        to="accreditation.participant",
                    ),
                ),
                (
                    "step",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approvals",
                        to="accreditation.step",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approvals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Draft",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *applicant_fields("draft"),
                ("created", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("expires_at", models.DateTimeField(db_index=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="drafts",
                        to="accreditation.event",
                    ),
                ),
                (
                    "invitation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="drafts",
                        to="accreditation.invitation",
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="drafts",
                        to="accreditation.participant",
                    ),
                ),
                (
                    "participant_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="drafts",
                        to="accreditation.participanttype",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="drafts",
                        to="accreditation.tenant",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registration_draft",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
            },
        ),
        migrations.AddIndex(
            model_name="event",
            index=models.Index(fields=["tenant", "status"], name="event_tenant_status"),
        ),
        migrations.AddIndex(
            model_name="step",
            index=models.Index(fields=["workflow", "name"], name="step_workflow_name"),
        ),
        migrations.AddIndex(
            model_name="invitation",
            index=models.Index(fields=["tenant", "event", "email"], name="invitation_event_email"),
        ),
        migrations.AddIndex(
            model_name="participant",
            index=models.Index(
                fields=["tenant", "event", "participant_type", "organization"],
                name="participant_type_org",
            ),
        ),
        migrations.AddIndex(
            model_name="participant",
            index=models.Index(
                condition=models.Q(("deleted__isnull", True)),
                fields=["invitation"],
                name="participant_invitation_act",
            ),
        ),
        migrations.AddConstraint(
            model_name="tenant",
            constraint=models.UniqueConstraint(fields=("slug", "deleted"), name="unique_tenant_slug_with_optional"),
        ),
        migrations.AddConstraint(
            model_name="tenant",
            constraint=models.UniqueConstraint(
                condition=models.Q(("deleted", None)),
                fields=("slug",),
                name="unique_tenant_slug_without_optional",
            ),
        ),
        migrations.AddConstraint(
            model_name="role",
            constraint=models.UniqueConstraint(fields=("tenant", "name", "deleted"), name="unique_role_with_optional"),
        ),
        migrations.AddConstraint(
            model_name="role",
            constraint=models.UniqueConstraint(
                condition=models.Q(("deleted", None)),
                fields=("tenant", "name"),
                name="unique_role_without_optional",
            ),
        ),
        migrations.AddConstraint(
            model_name="participant",
            constraint=models.UniqueConstraint(
                fields=("tenant", "event", "email", "deleted"),
                name="unique_participant_email_with_optional",
            ),
        ),
        migrations.AddConstraint(
            model_name="participant",
            constraint=models.UniqueConstraint(
                condition=models.Q(("deleted", None)),
                fields=("tenant", "event", "email"),
                name="unique_participant_email_without_optional",
            ),
        ),
        migrations.AddConstraint(
            model_name="approval",
            constraint=models.UniqueConstraint(
                fields=("participant", "step", "user", "created"),
                name="unique_approval",
            ),
        ),
    ]
