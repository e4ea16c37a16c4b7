from django.db import models
from django.conf import settings
from django.core.validators import RegexValidator
from django.db.models import Count, F, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from bloghub.exceptions import ConflictError
from .utils import (
    make_excerpt,
    normalize_tags,
    read_time_minutes,
    slug_stamp,
    slugify_text,
    stamped_slug,
)

# We reference the custom User model using settings.AUTH_USER_MODEL
User = settings.AUTH_USER_MODEL


class CategoryQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def with_blog_count(self):
        return self.annotate(
            blog_count=Count(
                "blogs", filter=Q(blogs__status="published"), distinct=True
            )
        )


class Category(models.Model):
    name = models.CharField(max_length=50, unique=True)
    slug = models.SlugField(max_length=60, unique=True, blank=True)
    description = models.CharField(max_length=200, blank=True)
    color = models.CharField(
        max_length=7,
        default="#3B82F6",
        validators=[
            RegexValidator(
                r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$",
                "Please provide a valid hex color",
            )
        ],
    )
    icon = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True)
    # PROTECT backs up the explicit "has subcategories" check in delete()
    parent_category = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="subcategories",
    )
    order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CategoryQuerySet.as_manager()

    class Meta:
        ordering = ["order", "name"]
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        indexes = [
            models.Index(fields=["is_active", "order"], name="category_active_order_idx"),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.slug = slugify_text(self.name)
        super().save(*args, **kwargs)

    def validate_parent(self, parent_id):
        """
        Returns the Category to use as parent. Rejects a missing parent and
        any choice that would close a cycle (the category itself or one of
        its descendants).
        """
        if parent_id is None:
            return None
        try:
            parent = Category.objects.get(pk=parent_id)
        except Category.DoesNotExist:
            raise NotFound("Parent category not found")

        if self.pk is None:
            return parent
        if parent.pk == self.pk:
            raise ValidationError("Category cannot be parent of itself")

        # Walk up from the new parent; meeting self means a cycle
        seen = {parent.pk}
        ancestor_id = parent.parent_category_id
        while ancestor_id is not None:
            if ancestor_id == self.pk:
                raise ValidationError("Category cannot be a child of its own subcategory")
            if ancestor_id in seen:
                break
            seen.add(ancestor_id)
            ancestor_id = (
                Category.objects.filter(pk=ancestor_id)
                .values_list("parent_category_id", flat=True)
                .first()
            )
        return parent

    def delete(self, *args, **kwargs):
        if self.blogs.exists():
            raise ConflictError("Cannot delete category with associated blogs")
        if self.subcategories.exists():
            raise ConflictError("Cannot delete category with subcategories")
        return super().delete(*args, **kwargs)


class BlogStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"


class BlogQuerySet(models.QuerySet):
    def published(self):
        return self.filter(status=BlogStatus.PUBLISHED)

    def visible_to(self, user):
        """Published blogs, plus the caller's own drafts; admins see everything."""
        if user is None or not user.is_authenticated:
            return self.published()
        if user.is_effective_admin:
            return self
        return self.filter(Q(status=BlogStatus.PUBLISHED) | Q(author=user))

    def search(self, term):
        return self.filter(Q(title__icontains=term) | Q(tags__icontains=term))

    def with_counts(self):
        return self.annotate(comment_count=Count("comments", distinct=True))


class Blog(models.Model):
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name="blogs")
    # Categories in use cannot be deleted
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="blogs")

    # Essential blog fields
    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    content = models.TextField()
    excerpt = models.CharField(max_length=300, blank=True)
    meta_description = models.CharField(max_length=160, blank=True)
    tags = models.JSONField(default=list, blank=True)
    image = models.CharField(max_length=500, blank=True)

    # Management fields
    status = models.CharField(
        max_length=10, choices=BlogStatus.choices, default=BlogStatus.DRAFT
    )
    featured = models.BooleanField(default=False)
    read_time = models.PositiveIntegerField(default=1)
    view_count = models.PositiveIntegerField(default=0)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BlogQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Blog"
        verbose_name_plural = "Blogs"
        indexes = [
            models.Index(fields=["author", "status"], name="blog_author_status_idx"),
            models.Index(fields=["category", "status"], name="blog_category_status_idx"),
            models.Index(fields=["status", "-published_at"], name="blog_status_published_idx"),
            models.Index(fields=["featured", "-published_at"], name="blog_featured_idx"),
        ]

    def __str__(self):
        return self.title

    def _title_changed(self):
        if self.pk is None:
            return True
        old_title = Blog.objects.filter(pk=self.pk).values_list("title", flat=True).first()
        return old_title != self.title

    def _unique_slug(self):
        stamp = slug_stamp()
        slug = stamped_slug(self.title, stamp)
        # Two titles generated within the same millisecond get the next stamp
        while Blog.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            stamp += 1
            slug = stamped_slug(self.title, stamp)
        return slug

    def save(self, *args, **kwargs):
        if not self.slug or self._title_changed():
            self.slug = self._unique_slug()

        self.tags = normalize_tags(self.tags)
        self.read_time = read_time_minutes(self.content)
        if not self.excerpt:
            self.excerpt = make_excerpt(self.content)

        # published_at is set once, the first time the blog goes live
        if self.status == BlogStatus.PUBLISHED and self.published_at is None:
            self.published_at = timezone.now()

        super().save(*args, **kwargs)

    def increment_views(self):
        Blog.objects.filter(pk=self.pk).update(view_count=F("view_count") + 1)
        self.refresh_from_db(fields=["view_count"])

    def is_visible_to(self, user):
        if self.status == BlogStatus.PUBLISHED:
            return True
        if user is None or not user.is_authenticated:
            return False
        return user.can_modify(self.author_id)


class CommentQuerySet(models.QuerySet):
    def top_level(self):
        return self.filter(parent_comment__isnull=True)

    def with_reply_count(self):
        return self.annotate(reply_count=Count("replies", distinct=True))


class Comment(models.Model):
    # Deleting a blog deletes its comments
    blog = models.ForeignKey(Blog, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="comments")
    text = models.TextField(max_length=1000)
    # Replies are one level deep, so CASCADE reaches exactly the direct replies
    parent_comment = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="replies",
    )
    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CommentQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Comment"
        verbose_name_plural = "Comments"
        indexes = [
            models.Index(fields=["blog", "-created_at"], name="comment_blog_created_idx"),
        ]

    def __str__(self):
        body_snippet = self.text[:50].replace("\n", " ")
        return f"Comment: '{body_snippet}...' by {self.user} on Blog #{self.blog_id}"

    def mark_edited(self, text):
        self.text = text
        self.is_edited = True
        self.edited_at = timezone.now()
        self.save()
