import logging

from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from bloghub.exceptions import InvalidStateError

logger = logging.getLogger(__name__)

ADMIN_REQUEST_REASON_MAX_LENGTH = 500


class Role(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"
    SUPERADMIN = "superadmin", "Superadmin"


class AdminRequestStatus(models.TextChoices):
    NONE = "none", "None"
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


# --- Custom User Manager ---
class UserManager(BaseUserManager):
    """
    Custom user model manager where email is the unique identifier
    for authentication instead of usernames.
    """

    def create_user(self, email, password, **extra_fields):
        """
        Creates and saves a User with the given email and password.
        """
        if not email:
            raise ValueError("The Email must be set")

        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)  # Handles password hashing
        user.save()
        return user

    def create_superadmin(self, email, password, **extra_fields):
        """
        Creates and saves the Superadmin with the given email and password.
        """
        extra_fields["role"] = Role.SUPERADMIN
        extra_fields.setdefault("is_active", True)
        return self.create_user(email, password, **extra_fields)

    def manageable_by(self, actor):
        """Users the given admin-level actor may list, view and delete."""
        if actor.role == Role.SUPERADMIN:
            return self.filter(role__in=[Role.USER, Role.ADMIN])
        if actor.role == Role.ADMIN:
            return self.filter(role=Role.USER)
        return self.none()


# --- Custom User Model ---
class User(AbstractBaseUser):
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=100)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)

    # Profile
    bio = models.CharField(max_length=500, blank=True)
    avatar = models.CharField(max_length=500, blank=True)
    website = models.CharField(max_length=200, blank=True)

    is_active = models.BooleanField(default=True)
    login_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # The single outstanding admin-access request (a new request overwrites
    # the previous, already reviewed one)
    admin_request_status = models.CharField(
        max_length=10,
        choices=AdminRequestStatus.choices,
        default=AdminRequestStatus.NONE,
    )
    admin_request_reason = models.CharField(
        max_length=ADMIN_REQUEST_REASON_MAX_LENGTH, blank=True
    )
    admin_request_requested_at = models.DateTimeField(null=True, blank=True)
    admin_request_reviewed_at = models.DateTimeField(null=True, blank=True)
    admin_request_reviewed_by = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_admin_requests",
    )
    admin_request_message = models.CharField(max_length=500, blank=True)

    # Social graph. Deleting a user removes the rows of both directions.
    following = models.ManyToManyField(
        "self", symmetrical=False, related_name="followers", blank=True
    )
    bookmarks = models.ManyToManyField(
        "blogs.Blog", related_name="bookmarked_by", blank=True
    )

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        indexes = [
            models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
            models.Index(fields=["admin_request_status"], name="user_admin_request_idx"),
        ]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.name.strip()

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email.split("@")[0]

    # --- Role checks ---

    @property
    def has_admin_role(self):
        """True for admin and superadmin accounts, approved or not."""
        return self.role in (Role.ADMIN, Role.SUPERADMIN)

    def is_authorized_for_role(self):
        """
        An admin only holds admin privileges once a superadmin approved the
        request. Users and superadmins are always authorized.
        """
        if self.role == Role.ADMIN:
            return self.admin_request_status == AdminRequestStatus.APPROVED
        if self.role in (Role.USER, Role.SUPERADMIN):
            return True
        raise ValueError(f"Unknown role: {self.role!r}")

    @property
    def is_effective_admin(self):
        """Admin-level rights that are actually usable right now."""
        return self.has_admin_role and self.is_authorized_for_role()

    def login_denied_message(self):
        """Explains why is_authorized_for_role() failed, for the login response."""
        status = self.admin_request_status
        if status == AdminRequestStatus.PENDING:
            return "Your admin access request is pending approval from a superadmin"
        if status == AdminRequestStatus.REJECTED:
            reason = self.admin_request_message or "No reason provided"
            return f"Your admin access request was rejected: {reason}"
        return "Admin access not approved. Please request admin access first."

    def can_manage(self, other):
        """Superadmins manage users and admins; admins manage plain users."""
        if other.pk == self.pk:
            return False
        if self.role == Role.SUPERADMIN:
            return other.role in (Role.USER, Role.ADMIN)
        if self.role == Role.ADMIN:
            return self.is_authorized_for_role() and other.role == Role.USER
        return False

    def can_modify(self, owner_id):
        """Content rule shared by blogs and comments: the owner or any admin."""
        return self.pk == owner_id or self.is_effective_admin

    # --- Admin-request state machine ---

    def _require_superadmin(self, reviewer):
        if reviewer is None or reviewer.role != Role.SUPERADMIN:
            raise PermissionDenied("Superadmin access required")

    def _mark_reviewed(self, status, reviewer, message):
        self.admin_request_status = status
        self.admin_request_reviewed_at = timezone.now()
        self.admin_request_reviewed_by = reviewer
        self.admin_request_message = message or ""

    def request_admin_access(self, reason):
        if self.role != Role.USER:
            raise PermissionDenied("Only regular users can request admin access")

        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Reason is required to request admin access")
        if len(reason) > ADMIN_REQUEST_REASON_MAX_LENGTH:
            raise ValidationError(
                f"Reason cannot exceed {ADMIN_REQUEST_REASON_MAX_LENGTH} characters"
            )
        if self.admin_request_status == AdminRequestStatus.PENDING:
            raise InvalidStateError("An admin access request is already pending")

        self.admin_request_status = AdminRequestStatus.PENDING
        self.admin_request_reason = reason
        self.admin_request_requested_at = timezone.now()
        self.save()
        logger.info("User %s requested admin access", self.pk)

    def cancel_admin_request(self):
        if self.admin_request_status != AdminRequestStatus.PENDING:
            raise InvalidStateError("No pending admin request to cancel")

        self.admin_request_status = AdminRequestStatus.NONE
        self.admin_request_requested_at = None
        self.admin_request_reason = ""
        self.save()
        logger.info("User %s cancelled their admin access request", self.pk)

    def approve_admin_request(self, reviewer, message=""):
        self._require_superadmin(reviewer)
        if self.role == Role.SUPERADMIN:
            raise PermissionDenied("Cannot modify a superadmin account")

        self.role = Role.ADMIN
        self._mark_reviewed(AdminRequestStatus.APPROVED, reviewer, message)
        self.save()
        logger.info("Superadmin %s approved admin access for user %s", reviewer.pk, self.pk)

    def reject_admin_request(self, reviewer, message=""):
        self._require_superadmin(reviewer)
        if self.role == Role.SUPERADMIN:
            raise PermissionDenied("Cannot modify a superadmin account")

        self._mark_reviewed(AdminRequestStatus.REJECTED, reviewer, message)
        self.save()
        logger.info("Superadmin %s rejected admin access for user %s", reviewer.pk, self.pk)

    def revoke_admin_access(self, reviewer, message=""):
        self._require_superadmin(reviewer)
        if self.role == Role.SUPERADMIN:
            raise PermissionDenied("Cannot revoke superadmin access")
        if self.role != Role.ADMIN:
            raise InvalidStateError("User is not an admin")

        self.role = Role.USER
        self._mark_reviewed(
            AdminRequestStatus.REJECTED, reviewer, message or "Admin access revoked"
        )
        self.save()
        logger.info("Superadmin %s revoked admin access for user %s", reviewer.pk, self.pk)

    def set_role(self, actor, role):
        """Direct role change by a superadmin, outside the request workflow."""
        self._require_superadmin(actor)
        if self.role == Role.SUPERADMIN:
            raise PermissionDenied("Cannot modify superadmin role")
        if role not in (Role.USER, Role.ADMIN):
            raise ValidationError("Invalid role specified")

        self.role = role
        self.save(update_fields=["role", "updated_at"])
        logger.info("Superadmin %s set role of user %s to %s", actor.pk, self.pk, role)
