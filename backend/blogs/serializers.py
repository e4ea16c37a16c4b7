from django.contrib.auth import get_user_model
from rest_framework import serializers

from bloghub.exceptions import ConflictError
from likes.models import Like, TargetType
from .models import Blog, Category, Comment
from .utils import slugify_text

# --- Setup ---
User = get_user_model()

# --- Helper Serializers ---


class AuthorSerializer(serializers.ModelSerializer):
    """Minimal serializer for displaying the Blog/Comment author."""

    class Meta:
        model = User
        fields = ("id", "name", "email", "avatar")
        read_only_fields = fields


def _request_user(serializer):
    request = serializer.context.get("request")
    return getattr(request, "user", None)


# ------------------------------------
# --- Category Serializer ---
# ------------------------------------


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ("id", "name", "slug", "color", "icon")
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    parent_category = serializers.PrimaryKeyRelatedField(read_only=True)
    # Write side of parent_category; resolved by Category.validate_parent
    parent_category_id = serializers.IntegerField(
        write_only=True, required=False, allow_null=True
    )
    subcategories = serializers.SerializerMethodField()
    blog_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = (
            "id",
            "name",
            "slug",
            "description",
            "color",
            "icon",
            "is_active",
            "order",
            "parent_category",
            "parent_category_id",
            "subcategories",
            "blog_count",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "slug", "created_at", "updated_at")
        # Duplicates are reported as conflicts in validate_name
        extra_kwargs = {"name": {"validators": []}}

    def get_subcategories(self, obj):
        if not self.context.get("with_subcategories"):
            return None
        children = obj.subcategories.all()
        if not self.context.get("include_inactive"):
            children = children.filter(is_active=True)
        return CategorySummarySerializer(children, many=True).data

    def get_blog_count(self, obj):
        count = getattr(obj, "blog_count", None)
        return count if count is not None else obj.blogs.published().count()

    def validate_name(self, value):
        value = value.strip()
        others = Category.objects.all()
        if self.instance is not None:
            others = others.exclude(pk=self.instance.pk)
        if others.filter(name__iexact=value).exists():
            raise ConflictError("Category already exists")
        if others.filter(slug=slugify_text(value)).exists():
            raise ConflictError("A category with a similar name already exists")
        return value

    def validate(self, attrs):
        if "parent_category_id" in attrs:
            instance = self.instance or Category()
            attrs["parent_category"] = instance.validate_parent(attrs.pop("parent_category_id"))
        return attrs


class CategoryOrderSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    order = serializers.IntegerField()


class CategoryReorderSerializer(serializers.Serializer):
    categories = CategoryOrderSerializer(many=True)


class BlogFilterSerializer(serializers.Serializer):
    """Query-string filters for the blog listing."""

    search = serializers.CharField(required=False, allow_blank=True)
    category = serializers.IntegerField(required=False)
    author = serializers.IntegerField(required=False)


# ------------------------------------
# --- Blog Serializers ---
# ------------------------------------


# ----------------- 1. LIST SERIALIZER -----------------
class BlogListSerializer(serializers.ModelSerializer):
    author = AuthorSerializer(read_only=True)
    category = CategorySummarySerializer(read_only=True)

    class Meta:
        model = Blog
        fields = (
            "id",
            "author",
            "category",
            "title",
            "slug",
            "excerpt",
            "tags",
            "image",
            "status",
            "featured",
            "read_time",
            "view_count",
            "published_at",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class BlogActivitySerializer(serializers.ModelSerializer):
    """A blog as it appears in the admin activity feed."""

    author = AuthorSerializer(read_only=True)

    class Meta:
        model = Blog
        fields = ("id", "title", "author", "status", "created_at")
        read_only_fields = fields


# ----------------- 2. DETAIL SERIALIZER -----------------
class BlogDetailSerializer(BlogListSerializer):
    like_count = serializers.SerializerMethodField()
    comment_count = serializers.SerializerMethodField()
    is_liked = serializers.SerializerMethodField()
    is_bookmarked = serializers.SerializerMethodField()

    class Meta(BlogListSerializer.Meta):
        fields = BlogListSerializer.Meta.fields + (
            "content",
            "meta_description",
            "like_count",
            "comment_count",
            "is_liked",
            "is_bookmarked",
        )
        read_only_fields = fields

    def get_like_count(self, obj):
        return Like.objects.count_for(TargetType.BLOG, obj.pk)

    def get_comment_count(self, obj):
        count = getattr(obj, "comment_count", None)
        return count if count is not None else obj.comments.count()

    def get_is_liked(self, obj):
        return Like.objects.is_liked_by(_request_user(self), TargetType.BLOG, obj.pk)

    def get_is_bookmarked(self, obj):
        user = _request_user(self)
        if user is None or not user.is_authenticated:
            return False
        return user.bookmarks.filter(pk=obj.pk).exists()


# ----------------- 3. WRITE SERIALIZER -----------------
class BlogWriteSerializer(serializers.ModelSerializer):
    """
    Used for creating (POST) and updating (PUT/PATCH) a Blog.
    'author' is set in the view from request.user; slug, read_time and
    published_at are derived in Blog.save().
    """

    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False
    )

    class Meta:
        model = Blog
        fields = (
            "title",
            "content",
            "excerpt",
            "meta_description",
            "tags",
            "image",
            "status",
            "featured",
            "category",
        )

    def validate_category(self, value):
        if not value.is_active:
            raise serializers.ValidationError("Category is not active")
        return value


# ------------------------------------
# --- Comment Serializers ---
# ------------------------------------


class CommentSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)
    reply_count = serializers.SerializerMethodField()
    like_count = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = (
            "id",
            "blog",
            "user",
            "text",
            "parent_comment",
            "is_edited",
            "edited_at",
            "reply_count",
            "like_count",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "user", "is_edited", "edited_at", "created_at", "updated_at")

    def get_reply_count(self, obj):
        count = getattr(obj, "reply_count", None)
        return count if count is not None else obj.replies.count()

    def get_like_count(self, obj):
        return Like.objects.count_for(TargetType.COMMENT, obj.pk)

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment text is required")
        return value

    def validate_blog(self, value):
        """Checks that the commenter can see the blog."""
        if not value.is_visible_to(_request_user(self)):
            raise serializers.ValidationError("Blog not found")
        return value

    def validate(self, attrs):
        parent = attrs.get("parent_comment")
        if parent is not None:
            if parent.blog_id != attrs["blog"].pk:
                raise serializers.ValidationError(
                    {"parent_comment": "Parent comment belongs to a different blog"}
                )
            # Replies are one level deep
            if parent.parent_comment_id is not None:
                raise serializers.ValidationError(
                    {"parent_comment": "Cannot reply to a reply"}
                )
        return attrs


class CommentUpdateSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=1000)

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment text is required")
        return value
