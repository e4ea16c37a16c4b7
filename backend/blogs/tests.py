import shutil
import tempfile

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse

# We use the APIClient for making requests to DRF views
from rest_framework import status
from rest_framework.test import APIClient

from likes.models import Like, TargetType
from users.models import AdminRequestStatus, Role
from .models import Blog, BlogStatus, Category, Comment
from .utils import make_excerpt, normalize_tags, read_time_minutes, slugify_text

User = get_user_model()

# --- URL Name Definitions ---
BLOG_LIST_CREATE_URL = reverse("blog-list-create")
FEATURED_URL = reverse("blog-featured")
CATEGORY_LIST_CREATE_URL = reverse("category-list-create")
CATEGORY_WITH_COUNTS_URL = reverse("category-with-counts")
CATEGORY_ADMIN_ALL_URL = reverse("category-admin-all")
CATEGORY_REORDER_URL = reverse("category-reorder")
COMMENT_CREATE_URL = reverse("comment-create")
UPLOAD_IMAGE_URL = reverse("upload-image")


def blog_detail_url(blog_id):
    return reverse("blog-detail", kwargs={"pk": blog_id})


def category_detail_url(category_id):
    return reverse("category-detail", kwargs={"pk": category_id})


def comment_detail_url(comment_id):
    return reverse("comment-detail", kwargs={"pk": comment_id})


# --- Helper Functions for Test Setup ---


def create_user(email="author@test.com", **params):
    """Create and return a new regular user."""
    params.setdefault("name", email.split("@")[0].title())
    return User.objects.create_user(email=email, password="password123", **params)


def create_admin(email="admin@test.com"):
    """Create and return an approved admin."""
    return create_user(
        email=email, role=Role.ADMIN, admin_request_status=AdminRequestStatus.APPROVED
    )


def create_category(name="Tech", **params):
    return Category.objects.create(name=name, **params)


def create_blog(author, category, **params):
    """Create and return a new blog, setting required fields if missing."""
    defaults = {
        "title": "Default Test Blog Title",
        "content": "Default test content.",
        "status": BlogStatus.PUBLISHED,
    }
    defaults.update(params)
    return Blog.objects.create(author=author, category=category, **defaults)


def create_comment(user, blog, **params):
    defaults = {"text": "Default test comment."}
    defaults.update(params)
    return Comment.objects.create(user=user, blog=blog, **defaults)


# ----------------------------------------------------------------------
# A. Derived fields
# ----------------------------------------------------------------------


class BlogUtilsTests(TestCase):
    def test_slugify_text(self):
        self.assertEqual(slugify_text("  Hello, World!  Again "), "hello-world-again")
        self.assertEqual(slugify_text("C++ -- and   Rust"), "c-and-rust")

    def test_read_time(self):
        self.assertEqual(read_time_minutes(""), 1)
        self.assertEqual(read_time_minutes("word " * 200), 1)
        self.assertEqual(read_time_minutes("word " * 201), 2)

    def test_excerpt(self):
        self.assertEqual(make_excerpt("short"), "short")
        excerpt = make_excerpt("x" * 400)
        self.assertEqual(len(excerpt), 300)
        self.assertTrue(excerpt.endswith("..."))

    def test_normalize_tags(self):
        self.assertEqual(normalize_tags([" Python", "python", "", "Django "]), ["python", "django"])


class BlogModelTests(TestCase):
    def setUp(self):
        self.user = create_user()
        self.category = create_category()

    def test_slug_has_title_and_stamp(self):
        blog = create_blog(self.user, self.category, title="My First Post!")
        self.assertRegex(blog.slug, r"^my-first-post-\d+$")

    def test_identical_titles_get_distinct_slugs(self):
        first = create_blog(self.user, self.category, title="Same Title")
        second = create_blog(self.user, self.category, title="Same Title")

        self.assertNotEqual(first.slug, second.slug)
        self.assertTrue(second.slug.startswith("same-title-"))

    def test_slug_follows_title_changes(self):
        blog = create_blog(self.user, self.category, title="Old Title")
        blog.title = "New Title"
        blog.save()

        self.assertTrue(blog.slug.startswith("new-title-"))

    def test_published_at_is_set_once(self):
        blog = create_blog(self.user, self.category, status=BlogStatus.DRAFT)
        self.assertIsNone(blog.published_at)

        blog.status = BlogStatus.PUBLISHED
        blog.save()
        first_published = blog.published_at
        self.assertIsNotNone(first_published)

        blog.status = BlogStatus.DRAFT
        blog.save()
        blog.status = BlogStatus.PUBLISHED
        blog.save()
        self.assertEqual(blog.published_at, first_published)

    def test_derived_fields(self):
        blog = create_blog(self.user, self.category, content="word " * 450, tags=["A", "a", " b "])

        self.assertEqual(blog.read_time, 3)
        self.assertTrue(blog.excerpt.endswith("..."))
        self.assertEqual(blog.tags, ["a", "b"])


# ----------------------------------------------------------------------
# B. Blog API
# ----------------------------------------------------------------------


class BlogAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.author = create_user()
        self.other = create_user(email="other@test.com")
        self.admin = create_admin()
        self.category = create_category()
        self.published = create_blog(self.author, self.category, title="Published Blog")
        self.draft = create_blog(
            self.author, self.category, title="Draft Blog", status=BlogStatus.DRAFT
        )

    def test_public_list_shows_published_only(self):
        res = self.client.get(BLOG_LIST_CREATE_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(res.data["results"][0]["title"], "Published Blog")

    def test_author_sees_own_drafts(self):
        self.client.force_authenticate(user=self.author)
        res = self.client.get(BLOG_LIST_CREATE_URL)
        self.assertEqual(res.data["total"], 2)

        self.client.force_authenticate(user=self.other)
        res = self.client.get(BLOG_LIST_CREATE_URL)
        self.assertEqual(res.data["total"], 1)

    def test_admin_sees_all(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(BLOG_LIST_CREATE_URL)
        self.assertEqual(res.data["total"], 2)

    def test_search_title_and_tags(self):
        create_blog(self.other, self.category, title="Other", tags=["Django"])

        res = self.client.get(BLOG_LIST_CREATE_URL, {"search": "django"})
        self.assertEqual([b["title"] for b in res.data["results"]], ["Other"])

        res = self.client.get(BLOG_LIST_CREATE_URL, {"search": "PUBLISHED"})
        self.assertEqual(res.data["total"], 1)

    def test_filter_by_category_and_author(self):
        news = create_category(name="News")
        create_blog(self.other, news, title="Headline")

        res = self.client.get(BLOG_LIST_CREATE_URL, {"category": news.id})
        self.assertEqual([b["title"] for b in res.data["results"]], ["Headline"])

        res = self.client.get(BLOG_LIST_CREATE_URL, {"author": self.author.id})
        self.assertEqual([b["title"] for b in res.data["results"]], ["Published Blog"])

    def test_non_numeric_category_filter(self):
        res = self.client.get(BLOG_LIST_CREATE_URL, {"category": "abc"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("category", res.data["errors"])

    def test_non_numeric_author_filter(self):
        res = self.client.get(BLOG_LIST_CREATE_URL, {"author": "abc"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("author", res.data["errors"])

    def test_missing_blog_error_code(self):
        self.client.force_authenticate(user=self.author)
        res = self.client.patch(blog_detail_url(9999), {"title": "Gone"})

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["code"], "not_found")

    def test_pagination_limit(self):
        for i in range(3):
            create_blog(self.other, self.category, title=f"Extra {i}")
        res = self.client.get(BLOG_LIST_CREATE_URL, {"limit": 2, "page": 2})

        self.assertEqual(res.data["current_page"], 2)
        self.assertEqual(res.data["total_pages"], 2)
        self.assertEqual(len(res.data["results"]), 2)

    def test_create_blog(self):
        self.client.force_authenticate(user=self.other)
        payload = {
            "title": "Fresh Post",
            "content": "Some content here",
            "category": self.category.id,
            "status": BlogStatus.PUBLISHED,
            "tags": ["News", "news"],
        }
        res = self.client.post(BLOG_LIST_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertRegex(res.data["slug"], r"^fresh-post-\d+$")
        self.assertEqual(res.data["tags"], ["news"])
        self.assertEqual(res.data["author"]["id"], self.other.id)
        self.assertIsNotNone(res.data["published_at"])

    def test_create_blog_requires_authentication(self):
        res = self.client.post(BLOG_LIST_CREATE_URL, {"title": "Attempt"})
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_blog_requires_category(self):
        self.client.force_authenticate(user=self.other)
        res = self.client.post(BLOG_LIST_CREATE_URL, {"title": "No category", "content": "x"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("category", res.data["errors"])

    def test_detail_increments_views(self):
        url = blog_detail_url(self.published.id)
        self.client.get(url)
        res = self.client.get(url)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["view_count"], 2)
        self.assertEqual(res.data["like_count"], 0)
        self.assertFalse(res.data["is_liked"])
        self.published.refresh_from_db()
        self.assertEqual(self.published.view_count, 2)

    def test_draft_detail_hidden_from_others(self):
        res = self.client.get(blog_detail_url(self.draft.id))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.other)
        res = self.client.get(blog_detail_url(self.draft.id))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.author)
        res = self.client.get(blog_detail_url(self.draft.id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_by_slug(self):
        res = self.client.get(reverse("blog-by-slug", kwargs={"slug": self.published.slug}))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.published.id)

    def test_by_user_hides_drafts_from_others(self):
        url = reverse("blog-by-user", kwargs={"user_pk": self.author.id})
        res = self.client.get(url)
        self.assertEqual(res.data["total"], 1)

        self.client.force_authenticate(user=self.author)
        res = self.client.get(url)
        self.assertEqual(res.data["total"], 2)

    def test_featured(self):
        create_blog(self.other, self.category, title="Star", featured=True)
        create_blog(
            self.other, self.category, title="Hidden star", featured=True, status=BlogStatus.DRAFT
        )
        res = self.client.get(FEATURED_URL)

        self.assertEqual([b["title"] for b in res.data["results"]], ["Star"])

    def test_non_owner_cannot_update(self):
        self.client.force_authenticate(user=self.other)
        res = self.client.patch(blog_detail_url(self.published.id), {"title": "Hijacked"})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.published.refresh_from_db()
        self.assertEqual(self.published.title, "Published Blog")

    def test_anonymous_cannot_delete(self):
        res = self.client.delete(blog_detail_url(self.published.id))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_updates_blog(self):
        self.client.force_authenticate(user=self.author)
        res = self.client.patch(blog_detail_url(self.draft.id), {"status": BlogStatus.PUBLISHED})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.draft.refresh_from_db()
        self.assertEqual(self.draft.status, BlogStatus.PUBLISHED)
        self.assertIsNotNone(self.draft.published_at)

    def test_admin_updates_any_blog(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.patch(blog_detail_url(self.published.id), {"featured": True})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["featured"])

    def test_unapproved_admin_is_treated_as_user(self):
        pending = create_user(
            email="pending@test.com",
            role=Role.ADMIN,
            admin_request_status=AdminRequestStatus.PENDING,
        )
        self.client.force_authenticate(user=pending)
        res = self.client.delete(blog_detail_url(self.published.id))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_blog_cascades_comments_and_likes(self):
        comment = create_comment(self.other, self.published)
        reply = create_comment(self.author, self.published, parent_comment=comment)
        Like.objects.toggle(self.other, TargetType.BLOG, self.published.id)
        Like.objects.toggle(self.author, TargetType.COMMENT, comment.id)
        Like.objects.toggle(self.other, TargetType.COMMENT, reply.id)
        blog_id = self.published.id

        self.client.force_authenticate(user=self.author)
        res = self.client.delete(blog_detail_url(blog_id))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Comment.objects.filter(blog_id=blog_id).exists())
        self.assertEqual(Like.objects.count_for(TargetType.BLOG, blog_id), 0)
        self.assertEqual(Like.objects.count(), 0)


TEST_MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class UploadAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = create_user()
        self.client.force_authenticate(user=self.user)

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def test_upload_image(self):
        image = SimpleUploadedFile("pic.png", b"\x89PNG fake", content_type="image/png")
        res = self.client.post(UPLOAD_IMAGE_URL, {"image": image}, format="multipart")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(res.data["url"].startswith("http://testserver/uploads/images/"))

    def test_upload_rejects_other_types(self):
        doc = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        res = self.client.post(UPLOAD_IMAGE_URL, {"image": doc}, format="multipart")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(UPLOAD_MAX_BYTES=4)
    def test_upload_rejects_large_files(self):
        image = SimpleUploadedFile("pic.png", b"0123456789", content_type="image/png")
        res = self.client.post(UPLOAD_IMAGE_URL, {"image": image}, format="multipart")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_requires_file(self):
        res = self.client.post(UPLOAD_IMAGE_URL, {}, format="multipart")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["detail"], "No file uploaded")

    def test_upload_avatar_updates_user(self):
        image = SimpleUploadedFile("me.jpg", b"fake jpeg", content_type="image/jpeg")
        res = self.client.post(reverse("me-avatar"), {"avatar": image}, format="multipart")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.avatar, res.data["avatar"])


# ----------------------------------------------------------------------
# C. Category API
# ----------------------------------------------------------------------


class CategoryAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = create_admin()
        self.user = create_user()
        self.tech = create_category("Tech")
        self.web = create_category("Web Dev", parent_category=self.tech)

    def test_list_active_categories_with_subcategories(self):
        create_category("Archived", is_active=False)
        res = self.client.get(CATEGORY_LIST_CREATE_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        names = [c["name"] for c in res.data]
        self.assertEqual(names, ["Tech", "Web Dev"])
        tech = res.data[0]
        self.assertEqual([s["name"] for s in tech["subcategories"]], ["Web Dev"])

    def test_admin_all_includes_inactive(self):
        create_category("Archived", is_active=False)
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(CATEGORY_ADMIN_ALL_URL)

        self.assertEqual(len(res.data), 3)

    def test_with_counts_counts_published_blogs(self):
        create_blog(self.user, self.tech)
        create_blog(self.user, self.tech, status=BlogStatus.DRAFT)
        res = self.client.get(CATEGORY_WITH_COUNTS_URL)

        counts = {c["name"]: c["blog_count"] for c in res.data}
        self.assertEqual(counts["Tech"], 1)
        self.assertEqual(counts["Web Dev"], 0)

    def test_create_category(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.post(CATEGORY_LIST_CREATE_URL, {"name": "Data Science"})

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["slug"], "data-science")
        self.assertEqual(res.data["color"], "#3B82F6")

    def test_user_cannot_create_category(self):
        self.client.force_authenticate(user=self.user)
        res = self.client.post(CATEGORY_LIST_CREATE_URL, {"name": "Mine"})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_duplicate_name_conflicts(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.post(CATEGORY_LIST_CREATE_URL, {"name": "tech"})

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "conflict")

    def test_invalid_color(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.post(CATEGORY_LIST_CREATE_URL, {"name": "Color", "color": "blue"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_parent_not_found(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.post(
            CATEGORY_LIST_CREATE_URL, {"name": "Orphan", "parent_category_id": 9999}
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_category_cannot_be_its_own_parent(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.patch(
            category_detail_url(self.tech.id), {"parent_category_id": self.tech.id}
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.tech.refresh_from_db()
        self.assertIsNone(self.tech.parent_category_id)

    def test_category_cannot_move_under_descendant(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.patch(
            category_detail_url(self.tech.id), {"parent_category_id": self.web.id}
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rename_updates_slug(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.patch(category_detail_url(self.web.id), {"name": "Web Development"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["slug"], "web-development")

    def test_delete_parent_blocked_until_child_moves(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.delete(category_detail_url(self.tech.id))
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Category.objects.filter(pk=self.tech.pk).exists())

        res = self.client.patch(
            category_detail_url(self.web.id), {"parent_category_id": None}
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        res = self.client.delete(category_detail_url(self.tech.id))
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)

    def test_delete_category_with_blogs_conflicts(self):
        create_blog(self.user, self.web)
        self.client.force_authenticate(user=self.admin)
        res = self.client.delete(category_detail_url(self.web.id))

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_reorder(self):
        self.client.force_authenticate(user=self.admin)
        payload = {
            "categories": [
                {"id": self.tech.id, "order": 2},
                {"id": self.web.id, "order": 1},
            ]
        }
        res = self.client.put(CATEGORY_REORDER_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(list(Category.objects.values_list("name", flat=True)), ["Web Dev", "Tech"])

    def test_reorder_rejects_bare_list(self):
        self.client.force_authenticate(user=self.admin)
        payload = [{"id": self.tech.id, "order": 2}]
        res = self.client.put(CATEGORY_REORDER_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.tech.refresh_from_db()
        self.assertNotEqual(self.tech.order, 2)

    def test_by_slug(self):
        res = self.client.get(reverse("category-by-slug", kwargs={"slug": "web-dev"}))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.web.id)


# ----------------------------------------------------------------------
# D. Comment API
# ----------------------------------------------------------------------


class CommentAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.author = create_user()
        self.reader = create_user(email="reader@test.com")
        self.admin = create_admin()
        category = create_category()
        self.blog = create_blog(self.author, category)
        self.other_blog = create_blog(self.author, category, title="Another")
        self.comment = create_comment(self.reader, self.blog, text="First!")

    def test_create_comment(self):
        self.client.force_authenticate(user=self.reader)
        res = self.client.post(COMMENT_CREATE_URL, {"blog": self.blog.id, "text": "Nice post"})

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["user"]["id"], self.reader.id)
        self.assertIsNone(res.data["parent_comment"])

    def test_create_comment_requires_authentication(self):
        res = self.client.post(COMMENT_CREATE_URL, {"blog": self.blog.id, "text": "Hi"})
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_comment_on_missing_blog(self):
        self.client.force_authenticate(user=self.reader)
        res = self.client.post(COMMENT_CREATE_URL, {"blog": 9999, "text": "Hello"})

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reply(self):
        self.client.force_authenticate(user=self.author)
        payload = {"blog": self.blog.id, "text": "Thanks", "parent_comment": self.comment.id}
        res = self.client.post(COMMENT_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["parent_comment"], self.comment.id)

    def test_reply_to_reply_is_rejected(self):
        reply = create_comment(self.author, self.blog, parent_comment=self.comment)
        self.client.force_authenticate(user=self.reader)
        payload = {"blog": self.blog.id, "text": "Deeper", "parent_comment": reply.id}
        res = self.client.post(COMMENT_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_parent_must_be_on_same_blog(self):
        self.client.force_authenticate(user=self.reader)
        payload = {"blog": self.other_blog.id, "text": "Wrong", "parent_comment": self.comment.id}
        res = self.client.post(COMMENT_CREATE_URL, payload)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_blog_comments_are_top_level_with_reply_count(self):
        create_comment(self.author, self.blog, parent_comment=self.comment)
        create_comment(self.author, self.blog, parent_comment=self.comment)
        res = self.client.get(reverse("comment-by-blog", kwargs={"blog_pk": self.blog.id}))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 1)
        self.assertEqual(res.data["results"][0]["reply_count"], 2)

    def test_replies_oldest_first(self):
        first = create_comment(self.author, self.blog, parent_comment=self.comment, text="one")
        second = create_comment(self.reader, self.blog, parent_comment=self.comment, text="two")
        res = self.client.get(reverse("comment-replies", kwargs={"pk": self.comment.id}))

        self.assertEqual([c["id"] for c in res.data], [first.id, second.id])

    def test_replies_on_draft_hidden_from_others(self):
        draft = create_blog(self.author, self.blog.category, title="Draft", status=BlogStatus.DRAFT)
        comment = create_comment(self.author, draft)
        create_comment(self.author, draft, parent_comment=comment)
        url = reverse("comment-replies", kwargs={"pk": comment.id})

        res = self.client.get(url)
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.author)
        res = self.client.get(url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 1)

    def test_user_comments(self):
        res = self.client.get(reverse("comment-by-user", kwargs={"user_pk": self.reader.id}))
        self.assertEqual(res.data["total"], 1)

    def test_owner_edits_comment(self):
        self.client.force_authenticate(user=self.reader)
        res = self.client.patch(comment_detail_url(self.comment.id), {"text": "Edited"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["is_edited"])
        self.assertIsNotNone(res.data["edited_at"])
        self.assertEqual(res.data["text"], "Edited")

    def test_other_user_cannot_edit(self):
        self.client.force_authenticate(user=self.author)
        res = self.client.patch(comment_detail_url(self.comment.id), {"text": "Mine now"})

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_deletes_comment_with_replies_and_likes(self):
        reply = create_comment(self.author, self.blog, parent_comment=self.comment)
        Like.objects.toggle(self.author, TargetType.COMMENT, self.comment.id)
        Like.objects.toggle(self.reader, TargetType.COMMENT, reply.id)
        Like.objects.toggle(self.reader, TargetType.BLOG, self.blog.id)

        self.client.force_authenticate(user=self.admin)
        res = self.client.delete(comment_detail_url(self.comment.id))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Comment.objects.filter(pk__in=[self.comment.id, reply.id]).exists())
        self.assertEqual(Like.objects.count_for(TargetType.COMMENT, reply.id), 0)
        # The blog's own like is untouched
        self.assertEqual(Like.objects.count(), 1)
