from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.urls import reverse

# We use the APIClient for making requests to DRF views
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APIClient

from blogs.models import Blog, BlogStatus, Category, Comment
from likes.models import Like, TargetType
from .models import AdminRequestStatus, Role

User = get_user_model()

# --- URL Name Definitions ---
REGISTER_URL = reverse("register")
LOGIN_URL = reverse("login")
TOKEN_REFRESH_URL = reverse("token-refresh")
ME_URL = reverse("me")
BOOKMARK_LIST_URL = reverse("bookmark-list")
ADMIN_REQUEST_URL = reverse("admin-request")
ADMIN_REQUEST_STATUS_URL = reverse("admin-request-status")
ADMIN_REQUEST_CANCEL_URL = reverse("admin-request-cancel")
ADMIN_REQUEST_PENDING_URL = reverse("admin-request-pending")
ADMIN_REQUEST_HISTORY_URL = reverse("admin-request-history")
ADMIN_USERS_URL = reverse("admin-users")
ANALYTICS_URL = reverse("admin-analytics")
ACTIVITY_URL = reverse("admin-activity")


def approve_url(user_id):
    return reverse("admin-request-approve", kwargs={"pk": user_id})


def reject_url(user_id):
    return reverse("admin-request-reject", kwargs={"pk": user_id})


def revoke_url(user_id):
    return reverse("admin-request-revoke", kwargs={"pk": user_id})


def role_url(user_id):
    return reverse("admin-user-role", kwargs={"pk": user_id})


def managed_user_url(user_id):
    return reverse("admin-user-detail", kwargs={"pk": user_id})


def follow_url(user_id):
    return reverse("user-follow", kwargs={"pk": user_id})


def bookmark_url(blog_id):
    return reverse("bookmark-detail", kwargs={"blog_pk": blog_id})


# --- Helper Functions for Test Setup ---


def create_user(email="user@test.com", password="password123", **params):
    """Create and return a new regular user."""
    params.setdefault("name", email.split("@")[0].title())
    return User.objects.create_user(email=email, password=password, **params)


def create_superadmin(email="root@test.com", password="password123"):
    """Create and return the superadmin."""
    return User.objects.create_superadmin(email=email, password=password, name="Root")


def create_approved_admin(email="admin@test.com", password="password123"):
    """Create and return an admin whose request was approved."""
    return create_user(
        email=email,
        password=password,
        role=Role.ADMIN,
        admin_request_status=AdminRequestStatus.APPROVED,
    )


def create_blog(author, **params):
    """Create and return a blog, creating a category when none is given."""
    if "category" not in params:
        params["category"], _ = Category.objects.get_or_create(name="General")
    defaults = {
        "title": "Default Test Blog Title",
        "content": "Default test content.",
        "status": BlogStatus.PUBLISHED,
    }
    defaults.update(params)
    return Blog.objects.create(author=author, **defaults)


# ----------------------------------------------------------------------
# A. Registration and Login
# ----------------------------------------------------------------------


class AuthAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_user_returns_tokens(self):
        payload = {"email": "New@Test.com", "name": "New User", "password": "password123"}
        res = self.client.post(REGISTER_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIn("token", res.data)
        self.assertIn("refresh", res.data)
        self.assertNotIn("password", res.data)
        self.assertEqual(res.data["email"], "new@test.com")
        self.assertEqual(res.data["role"], Role.USER)

        user = User.objects.get(email="new@test.com")
        self.assertTrue(user.check_password("password123"))

    def test_register_duplicate_email_fails(self):
        create_user(email="taken@test.com")
        payload = {"email": "TAKEN@test.com", "name": "Again", "password": "password123"}
        res = self.client.post(REGISTER_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", res.data["errors"])

    def test_register_short_password_fails(self):
        payload = {"email": "short@test.com", "name": "Short", "password": "abc"}
        res = self.client.post(REGISTER_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email="short@test.com").exists())

    def test_register_with_admin_request_files_request(self):
        payload = {
            "email": "eager@test.com",
            "name": "Eager",
            "password": "password123",
            "request_admin_access": True,
            "admin_request_reason": "I moderate the forum",
        }
        res = self.client.post(REGISTER_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email="eager@test.com")
        self.assertEqual(user.role, Role.USER)
        self.assertEqual(user.admin_request_status, AdminRequestStatus.PENDING)
        self.assertEqual(res.data["admin_request"]["status"], AdminRequestStatus.PENDING)

    def test_login_success_counts_logins(self):
        create_user(email="login@test.com", password="password123")
        res = self.client.post(LOGIN_URL, {"email": "LOGIN@test.com", "password": "password123"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("token", res.data)
        user = User.objects.get(email="login@test.com")
        self.assertEqual(user.login_count, 1)
        self.assertIsNotNone(user.last_login)

    def test_login_wrong_password(self):
        create_user(email="login@test.com", password="password123")
        res = self.client.post(LOGIN_URL, {"email": "login@test.com", "password": "nope-nope"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["detail"], "Invalid credentials")

    def test_refresh_token_issues_access_token(self):
        create_user(email="login@test.com", password="password123")
        res = self.client.post(LOGIN_URL, {"email": "login@test.com", "password": "password123"})

        refresh = self.client.post(TOKEN_REFRESH_URL, {"refresh": res.data["refresh"]})
        self.assertEqual(refresh.status_code, status.HTTP_200_OK)
        self.assertIn("access", refresh.data)

    def test_bearer_token_authenticates_requests(self):
        create_user(email="login@test.com", password="password123")
        res = self.client.post(LOGIN_URL, {"email": "login@test.com", "password": "password123"})

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['token']}")
        me = self.client.get(ME_URL)
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["email"], "login@test.com")

    def test_me_requires_authentication(self):
        res = self.client.get(ME_URL)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn("code", res.data)


class AdminLoginGateTests(TestCase):
    """An admin role without an approved request cannot sign in."""

    def setUp(self):
        self.client = APIClient()

    def _login(self, email):
        return self.client.post(LOGIN_URL, {"email": email, "password": "password123"})

    def test_pending_admin_cannot_login(self):
        create_user(
            email="pending@test.com",
            role=Role.ADMIN,
            admin_request_status=AdminRequestStatus.PENDING,
        )
        res = self._login("pending@test.com")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("pending", res.data["detail"])
        self.assertNotIn("token", res.data)

    def test_rejected_admin_sees_reason(self):
        create_user(
            email="rejected@test.com",
            role=Role.ADMIN,
            admin_request_status=AdminRequestStatus.REJECTED,
            admin_request_message="not enough history",
        )
        res = self._login("rejected@test.com")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("not enough history", res.data["detail"])

    def test_admin_without_request_cannot_login(self):
        create_user(email="norequest@test.com", role=Role.ADMIN)
        res = self._login("norequest@test.com")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(User.objects.get(email="norequest@test.com").login_count, 0)

    def test_approved_admin_can_login(self):
        create_approved_admin(email="ok@test.com")
        res = self._login("ok@test.com")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["role"], Role.ADMIN)

    def test_unapproved_admin_token_is_refused_by_admin_routes(self):
        admin = create_user(email="pending@test.com", role=Role.ADMIN)
        self.client.force_authenticate(user=admin)

        res = self.client.get(ADMIN_USERS_URL)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("not approved", res.data["detail"])


# ----------------------------------------------------------------------
# B. Admin-access request workflow
# ----------------------------------------------------------------------


class AdminRequestAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.superadmin = create_superadmin()
        self.alice = create_user(email="alice@test.com", name="Alice")

    def test_request_approve_then_login(self):
        """alice asks for admin access, the superadmin approves, alice logs in."""
        self.client.force_authenticate(user=self.alice)
        res = self.client.post(ADMIN_REQUEST_URL, {"reason": "need to moderate spam"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["admin_request"]["status"], AdminRequestStatus.PENDING)

        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(approve_url(self.alice.id), {"message": "welcome"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        self.alice.refresh_from_db()
        self.assertEqual(self.alice.role, Role.ADMIN)
        self.assertEqual(self.alice.admin_request_status, AdminRequestStatus.APPROVED)
        self.assertEqual(self.alice.admin_request_message, "welcome")
        self.assertEqual(self.alice.admin_request_reviewed_by, self.superadmin)
        self.assertIsNotNone(self.alice.admin_request_reviewed_at)

        self.client.force_authenticate(user=None)
        res = self.client.post(LOGIN_URL, {"email": "alice@test.com", "password": "password123"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["role"], Role.ADMIN)

    def test_blank_reason_is_rejected(self):
        self.client.force_authenticate(user=self.alice)
        res = self.client.post(ADMIN_REQUEST_URL, {"reason": "   "})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.admin_request_status, AdminRequestStatus.NONE)

    def test_second_pending_request_is_invalid_state(self):
        self.alice.request_admin_access("first")
        self.client.force_authenticate(user=self.alice)
        res = self.client.post(ADMIN_REQUEST_URL, {"reason": "second"})

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "invalid_state")

    def test_re_request_after_rejection_overwrites_slot(self):
        self.alice.request_admin_access("first")
        self.alice.reject_admin_request(self.superadmin, "not yet")

        self.client.force_authenticate(user=self.alice)
        res = self.client.post(ADMIN_REQUEST_URL, {"reason": "second try"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.admin_request_status, AdminRequestStatus.PENDING)
        self.assertEqual(self.alice.admin_request_reason, "second try")

    def test_admin_cannot_request_again(self):
        admin = create_approved_admin()
        self.client.force_authenticate(user=admin)
        res = self.client.post(ADMIN_REQUEST_URL, {"reason": "more power"})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_pending_request(self):
        self.alice.request_admin_access("please")
        self.client.force_authenticate(user=self.alice)
        res = self.client.delete(ADMIN_REQUEST_CANCEL_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.admin_request_status, AdminRequestStatus.NONE)
        self.assertIsNone(self.alice.admin_request_requested_at)
        self.assertEqual(self.alice.admin_request_reason, "")

    def test_cancel_without_pending_request_is_invalid_state(self):
        self.client.force_authenticate(user=self.alice)
        res = self.client.delete(ADMIN_REQUEST_CANCEL_URL)

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "invalid_state")

    def test_status_reports_current_request(self):
        self.alice.request_admin_access("please")
        self.client.force_authenticate(user=self.alice)
        res = self.client.get(ADMIN_REQUEST_STATUS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["role"], Role.USER)
        self.assertEqual(res.data["admin_request"]["reason"], "please")

    def test_pending_list_is_superadmin_only(self):
        self.alice.request_admin_access("please")
        create_user(email="bob@test.com")

        self.client.force_authenticate(user=self.superadmin)
        res = self.client.get(ADMIN_REQUEST_PENDING_URL)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([u["email"] for u in res.data], ["alice@test.com"])

        self.client.force_authenticate(user=create_approved_admin())
        res = self.client.get(ADMIN_REQUEST_PENDING_URL)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_history_lists_reviewed_requests(self):
        self.alice.request_admin_access("please")
        self.alice.reject_admin_request(self.superadmin, "no")

        self.client.force_authenticate(user=self.superadmin)
        res = self.client.get(ADMIN_REQUEST_HISTORY_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["admin_request"]["reviewed_by"]["id"], self.superadmin.id)

    def test_reject_keeps_role(self):
        self.alice.request_admin_access("please")
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(reject_url(self.alice.id), {"message": "not now"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.role, Role.USER)
        self.assertEqual(self.alice.admin_request_status, AdminRequestStatus.REJECTED)

    def test_revoke_admin_access(self):
        admin = create_approved_admin()
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(revoke_url(admin.id), {})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        admin.refresh_from_db()
        self.assertEqual(admin.role, Role.USER)
        self.assertEqual(admin.admin_request_status, AdminRequestStatus.REJECTED)
        self.assertEqual(admin.admin_request_message, "Admin access revoked")

    def test_revoke_plain_user_is_invalid_state(self):
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(revoke_url(self.alice.id), {})

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_admin_cannot_revoke_superadmin(self):
        admin = create_approved_admin()
        self.client.force_authenticate(user=admin)
        res = self.client.put(revoke_url(self.superadmin.id), {})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.superadmin.refresh_from_db()
        self.assertEqual(self.superadmin.role, Role.SUPERADMIN)

    def test_superadmin_target_cannot_be_revoked(self):
        other = User.objects.create_superadmin(
            email="other-root@test.com", password="password123", name="Other"
        )
        with self.assertRaises(PermissionDenied):
            other.revoke_admin_access(self.superadmin)

        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(revoke_url(other.id), {})
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)


# ----------------------------------------------------------------------
# C. User administration
# ----------------------------------------------------------------------


class UserAdminAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.superadmin = create_superadmin()
        self.admin = create_approved_admin()
        self.user = create_user(email="plain@test.com")

    def test_admin_lists_only_users(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(ADMIN_USERS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(res.data["results"][0]["email"], "plain@test.com")

    def test_superadmin_lists_users_and_admins(self):
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.get(ADMIN_USERS_URL)

        self.assertEqual(res.data["total"], 2)

    def test_plain_user_cannot_list_users(self):
        self.client.force_authenticate(user=self.user)
        res = self.client.get(ADMIN_USERS_URL)

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_delete_admin(self):
        other_admin = create_approved_admin(email="admin2@test.com")
        self.client.force_authenticate(user=self.admin)
        res = self.client.delete(managed_user_url(other_admin.id))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(pk=other_admin.pk).exists())

    def test_admin_deletes_user(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.delete(managed_user_url(self.user.id))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())

    def test_superadmin_updates_role(self):
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(role_url(self.user.id), {"role": Role.ADMIN})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, Role.ADMIN)

    def test_role_update_rejects_superadmin_value(self):
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(role_url(self.user.id), {"role": Role.SUPERADMIN})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_superadmin_role_cannot_change(self):
        other = User.objects.create_superadmin(
            email="other-root@test.com", password="password123", name="Other"
        )
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.put(role_url(other.id), {"role": Role.USER})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_update_roles(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.put(role_url(self.user.id), {"role": Role.ADMIN})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_analytics(self):
        create_blog(self.user)
        create_blog(self.user, status=BlogStatus.DRAFT)
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.get(ANALYTICS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["blog_stats"]["total_blogs"], 2)
        self.assertEqual(res.data["blog_stats"]["published_blogs"], 1)
        self.assertEqual(res.data["top_authors"][0]["id"], self.user.id)

    def test_activity_for_admin_covers_users_and_blogs(self):
        blog = create_blog(self.user, status=BlogStatus.DRAFT)
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(ACTIVITY_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        registrations = [a["data"]["email"] for a in res.data if a["type"] == "user_registration"]
        self.assertEqual(registrations, ["plain@test.com"])
        blogs = [a["data"] for a in res.data if a["type"] == "blog_created"]
        self.assertEqual(len(blogs), 1)
        self.assertEqual(blogs[0]["id"], blog.id)
        self.assertEqual(blogs[0]["author"]["email"], "plain@test.com")
        timestamps = [a["timestamp"] for a in res.data]
        self.assertEqual(timestamps, sorted(timestamps, reverse=True))

    def test_activity_for_superadmin_includes_admins(self):
        self.client.force_authenticate(user=self.superadmin)
        res = self.client.get(ACTIVITY_URL)

        registrations = {a["data"]["email"] for a in res.data if a["type"] == "user_registration"}
        self.assertEqual(registrations, {"plain@test.com", "admin@test.com"})

    def test_activity_limit(self):
        for i in range(3):
            create_blog(self.user, title=f"Blog {i}")
        self.client.force_authenticate(user=self.superadmin)

        res = self.client.get(ACTIVITY_URL, {"limit": 2})
        self.assertEqual(len(res.data), 2)

        res = self.client.get(ACTIVITY_URL, {"limit": "abc"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_plain_user_cannot_see_activity(self):
        self.client.force_authenticate(user=self.user)
        res = self.client.get(ACTIVITY_URL)

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)


# ----------------------------------------------------------------------
# D. Own account, following and bookmarks
# ----------------------------------------------------------------------


class AccountAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = create_user(email="me@test.com", name="Me")
        self.other = create_user(email="other@test.com", name="Other")
        self.client.force_authenticate(user=self.user)

    def test_update_profile(self):
        res = self.client.patch(ME_URL, {"name": "New Name", "bio": "Hello"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "New Name")
        self.assertEqual(self.user.bio, "Hello")

    def test_update_password(self):
        res = self.client.patch(ME_URL, {"password": "another-pass"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("another-pass"))

    def test_role_cannot_be_self_assigned(self):
        self.client.patch(ME_URL, {"role": Role.SUPERADMIN})

        self.user.refresh_from_db()
        self.assertEqual(self.user.role, Role.USER)

    def test_follow_and_unfollow(self):
        res = self.client.post(follow_url(self.other.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["follower_count"], 1)

        # Following twice changes nothing
        res = self.client.post(follow_url(self.other.id))
        self.assertEqual(res.data["follower_count"], 1)

        res = self.client.delete(follow_url(self.other.id))
        self.assertEqual(res.data["follower_count"], 0)
        self.assertFalse(res.data["is_following"])

    def test_cannot_follow_self(self):
        res = self.client.post(follow_url(self.user.id))
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_follow_unknown_user(self):
        res = self.client.post(follow_url(9999))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_profile_counts(self):
        self.user.following.add(self.other)
        create_blog(self.other)
        res = self.client.get(reverse("user-detail", kwargs={"pk": self.other.id}))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["follower_count"], 1)
        self.assertEqual(res.data["blog_count"], 1)
        self.assertTrue(res.data["is_following"])
        self.assertNotIn("email", res.data)

    def test_bookmarks(self):
        blog = create_blog(self.other)
        res = self.client.post(bookmark_url(blog.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["is_bookmarked"])

        res = self.client.get(BOOKMARK_LIST_URL)
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(res.data["results"][0]["id"], blog.id)

        res = self.client.delete(bookmark_url(blog.id))
        self.assertFalse(res.data["is_bookmarked"])
        self.assertEqual(self.user.bookmarks.count(), 0)

    def test_cannot_bookmark_someone_elses_draft(self):
        draft = create_blog(self.other, status=BlogStatus.DRAFT)
        res = self.client.post(bookmark_url(draft.id))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_account_cascades(self):
        own_blog = create_blog(self.user, title="Mine")
        other_blog = create_blog(self.other, title="Theirs")
        Comment.objects.create(blog=own_blog, user=self.other, text="On my blog")
        Comment.objects.create(blog=other_blog, user=self.user, text="On theirs")
        Like.objects.toggle(self.other, TargetType.BLOG, own_blog.id)
        Like.objects.toggle(self.user, TargetType.BLOG, other_blog.id)
        self.user.following.add(self.other)
        self.other.following.add(self.user)
        self.other.bookmarks.add(own_blog)

        res = self.client.delete(ME_URL)

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())
        self.assertFalse(Blog.objects.filter(pk=own_blog.pk).exists())
        self.assertEqual(Comment.objects.count(), 0)
        self.assertEqual(Like.objects.count(), 0)
        self.assertEqual(self.other.following.count(), 0)
        self.assertEqual(self.other.followers.count(), 0)
        self.assertEqual(self.other.bookmarks.count(), 0)
        self.assertTrue(Blog.objects.filter(pk=other_blog.pk).exists())

    def test_superadmin_cannot_delete_own_account(self):
        root = create_superadmin()
        self.client.force_authenticate(user=root)
        res = self.client.delete(ME_URL)

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)


# ----------------------------------------------------------------------
# E. Management command
# ----------------------------------------------------------------------


class CreateSuperadminCommandTests(TestCase):
    def test_creates_single_superadmin(self):
        out = StringIO()
        call_command(
            "create_superadmin",
            email="Root@Test.com",
            name="Root",
            password="password123",
            stdout=out,
        )

        root = User.objects.get(email="root@test.com")
        self.assertEqual(root.role, Role.SUPERADMIN)
        self.assertTrue(root.check_password("password123"))
        self.assertIn("Superadmin created", out.getvalue())

        with self.assertRaises(CommandError):
            call_command(
                "create_superadmin",
                email="second@test.com",
                name="Second",
                password="password123",
                stdout=StringIO(),
            )
        self.assertEqual(User.objects.filter(role=Role.SUPERADMIN).count(), 1)
