from unittest import mock

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models.query import QuerySet
from django.test import TestCase
from django.urls import reverse

# We use the APIClient for making requests to DRF views
from rest_framework import status
from rest_framework.test import APIClient

from blogs.models import Blog, BlogStatus, Category, Comment
from users.models import AdminRequestStatus, Role
from .models import LIKED, UNLIKED, Like, TargetType

User = get_user_model()

# --- URL Name Definitions ---
LIKE_STATS_URL = reverse("like-stats")


def like_url(target_type, target_id):
    return reverse("like-target", kwargs={"target_type": target_type, "pk": target_id})


def check_url(target_type, target_id):
    return reverse("like-check", kwargs={"target_type": target_type, "pk": target_id})


def user_likes_url(user_id):
    return reverse("like-by-user", kwargs={"user_pk": user_id})


# --- Helper Functions for Test Setup ---


def create_user(email="bob@test.com", **params):
    """Create and return a new regular user."""
    params.setdefault("name", email.split("@")[0].title())
    return User.objects.create_user(email=email, password="password123", **params)


def create_blog(author, **params):
    category, _ = Category.objects.get_or_create(name="General")
    defaults = {
        "title": "Likeable Blog",
        "content": "Worth a like.",
        "status": BlogStatus.PUBLISHED,
    }
    defaults.update(params)
    return Blog.objects.create(author=author, category=category, **defaults)


# ----------------------------------------------------------------------
# A. Toggle semantics
# ----------------------------------------------------------------------


class LikeToggleTests(TestCase):
    def setUp(self):
        self.bob = create_user()
        self.blog = create_blog(self.bob)

    def test_toggle_twice_restores_count(self):
        before = Like.objects.count_for(TargetType.BLOG, self.blog.id)

        self.assertEqual(Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id), LIKED)
        self.assertEqual(Like.objects.count_for(TargetType.BLOG, self.blog.id), before + 1)
        self.assertEqual(Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id), UNLIKED)
        self.assertEqual(Like.objects.count_for(TargetType.BLOG, self.blog.id), before)

    def test_same_id_on_different_types_are_separate(self):
        Like.objects.toggle(self.bob, TargetType.BLOG, 1)
        Like.objects.toggle(self.bob, TargetType.COMMENT, 1)

        self.assertEqual(Like.objects.count_for(TargetType.BLOG, 1), 1)
        self.assertEqual(Like.objects.count_for(TargetType.COMMENT, 1), 1)

    def test_database_rejects_duplicate_like(self):
        Like.objects.create(user=self.bob, target_type=TargetType.BLOG, target_id=self.blog.id)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Like.objects.create(
                    user=self.bob, target_type=TargetType.BLOG, target_id=self.blog.id
                )

    def test_lost_race_resolves_as_liked(self):
        """
        A concurrent request already inserted the like after our delete found
        nothing; the unique constraint fires and the toggle reports 'liked'.
        """
        Like.objects.create(user=self.bob, target_type=TargetType.BLOG, target_id=self.blog.id)

        with mock.patch.object(QuerySet, "delete", return_value=(0, {})):
            result = Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id)

        self.assertEqual(result, LIKED)
        self.assertEqual(Like.objects.count_for(TargetType.BLOG, self.blog.id), 1)

    def test_is_liked_by_anonymous_is_false(self):
        from django.contrib.auth.models import AnonymousUser

        self.assertFalse(Like.objects.is_liked_by(AnonymousUser(), TargetType.BLOG, self.blog.id))


# ----------------------------------------------------------------------
# B. Likes API
# ----------------------------------------------------------------------


class LikeAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.author = create_user(email="author@test.com")
        self.bob = create_user()
        self.blog = create_blog(self.author)
        self.comment = Comment.objects.create(blog=self.blog, user=self.author, text="Hi")
        self.client.force_authenticate(user=self.bob)

    def test_like_then_unlike_blog(self):
        res = self.client.post(like_url("blog", self.blog.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"action": LIKED, "is_liked": True, "like_count": 1})

        res = self.client.post(like_url("blog", self.blog.id))
        self.assertEqual(res.data, {"action": UNLIKED, "is_liked": False, "like_count": 0})

    def test_like_comment(self):
        res = self.client.post(like_url("comment", self.comment.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(Like.objects.count_for(TargetType.COMMENT, self.comment.id), 1)

    def test_like_missing_blog(self):
        res = self.client.post(like_url("blog", 9999))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_like_someone_elses_draft(self):
        draft = create_blog(self.author, title="Draft", status=BlogStatus.DRAFT)
        res = self.client.post(like_url("blog", draft.id))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_like_requires_authentication(self):
        self.client.force_authenticate(user=None)
        res = self.client.post(like_url("blog", self.blog.id))

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_check_like(self):
        Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id)
        res = self.client.get(check_url("Blog", self.blog.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["is_liked"])
        self.assertEqual(res.data["like_count"], 1)

    def test_check_invalid_type(self):
        res = self.client.get(check_url("post", self.blog.id))

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid target type", res.data["detail"])

    def test_list_likers_is_public(self):
        Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id)
        self.client.force_authenticate(user=None)
        res = self.client.get(like_url("blog", self.blog.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(res.data["results"][0]["user"]["id"], self.bob.id)

    def test_likers_of_draft_hidden_from_others(self):
        draft = create_blog(self.author, title="Draft", status=BlogStatus.DRAFT)
        comment = Comment.objects.create(blog=draft, user=self.author, text="Hidden")
        Like.objects.toggle(self.author, TargetType.BLOG, draft.id)
        self.client.force_authenticate(user=None)

        res = self.client.get(like_url("blog", draft.id))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        res = self.client.get(like_url("comment", comment.id))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.author)
        res = self.client.get(like_url("blog", draft.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 1)

    def test_user_likes_type_filter(self):
        Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id)
        Like.objects.toggle(self.bob, TargetType.COMMENT, self.comment.id)

        res = self.client.get(user_likes_url(self.bob.id))
        self.assertEqual(res.data["total"], 2)

        res = self.client.get(user_likes_url(self.bob.id), {"type": "comment"})
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(res.data["results"][0]["target_type"], TargetType.COMMENT)

    def test_stats_for_admins(self):
        Like.objects.toggle(self.bob, TargetType.BLOG, self.blog.id)
        Like.objects.toggle(self.author, TargetType.BLOG, self.blog.id)
        Like.objects.toggle(self.bob, TargetType.COMMENT, self.comment.id)

        res = self.client.get(LIKE_STATS_URL)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        admin = create_user(
            email="admin@test.com",
            role=Role.ADMIN,
            admin_request_status=AdminRequestStatus.APPROVED,
        )
        self.client.force_authenticate(user=admin)
        res = self.client.get(LIKE_STATS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_likes"], 3)
        self.assertEqual(res.data["by_type"], {"Blog": 2, "Comment": 1})
        self.assertEqual(
            res.data["top_blogs"],
            [{"id": self.blog.id, "title": "Likeable Blog", "like_count": 2}],
        )
