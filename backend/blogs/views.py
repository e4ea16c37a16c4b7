import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from bloghub.pagination import paginate
from bloghub.uploads import store_image
from users.permissions import IsAdminOrReadOnly, IsAdminRole
from .models import Blog, Category, Comment
from .permissions import IsOwnerOrAdmin
from .serializers import (
    BlogDetailSerializer,
    BlogFilterSerializer,
    BlogListSerializer,
    BlogWriteSerializer,
    CategoryReorderSerializer,
    CategorySerializer,
    CommentSerializer,
    CommentUpdateSerializer,
)

logger = logging.getLogger(__name__)


def _check_owner(request, view, obj, owner_field):
    # FBVs only run has_permission; the object check has to be done by hand
    if not IsOwnerOrAdmin(owner_field).has_object_permission(request, view, obj):
        raise PermissionDenied("User not authorized")


# ----------------------------------------------------------------------
# 1. Blog Views
# ----------------------------------------------------------------------


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def blog_list_create(request):
    """
    GET: List published blogs (public) or all blogs (admin), with optional
    ?search=, ?category= and ?author= filters.
    POST: Create a new blog (authenticated users).
    """
    if request.method == "GET":
        filters = BlogFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        queryset = Blog.objects.visible_to(request.user)

        search = filters.validated_data.get("search", "").strip()
        if search:
            queryset = queryset.search(search)
        category = filters.validated_data.get("category")
        if category is not None:
            queryset = queryset.filter(category_id=category)
        author = filters.validated_data.get("author")
        if author is not None:
            queryset = queryset.filter(author_id=author)

        queryset = queryset.select_related("author", "category").order_by("-created_at")
        return paginate(request, queryset, BlogListSerializer)

    elif request.method == "POST":
        if not request.user.is_authenticated:
            raise NotAuthenticated()

        serializer = BlogWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        blog = serializer.save(author=request.user)
        logger.info("Blog %s created by user %s", blog.pk, request.user.pk)

        data = BlogDetailSerializer(blog, context={"request": request}).data
        return Response(data, status=status.HTTP_201_CREATED)


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([AllowAny])
def blog_detail(request, pk):
    """
    GET: Retrieve a blog; drafts only for their author and admins.
    PUT/PATCH/DELETE: author or admin only.
    """
    # --- GET (Retrieve) ---
    if request.method == "GET":
        blog = get_object_or_404(Blog.objects.select_related("author", "category"), pk=pk)
        if not blog.is_visible_to(request.user):
            raise NotFound("Blog not found")

        blog.increment_views()
        return Response(BlogDetailSerializer(blog, context={"request": request}).data)

    # --- PUT/PATCH/DELETE (Author or Admin) ---
    if not request.user.is_authenticated:
        raise NotAuthenticated()

    blog = get_object_or_404(Blog, pk=pk)
    _check_owner(request, blog_detail, blog, "author")

    if request.method in ["PUT", "PATCH"]:
        partial = request.method == "PATCH"
        serializer = BlogWriteSerializer(blog, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        blog = serializer.save()
        return Response(BlogDetailSerializer(blog, context={"request": request}).data)

    elif request.method == "DELETE":
        # Comments, replies and every like on them go in one transaction
        with transaction.atomic():
            blog.delete()
        logger.info("Blog %s deleted by user %s", pk, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@permission_classes([AllowAny])
def featured_blogs(request):
    queryset = (
        Blog.objects.published()
        .filter(featured=True)
        .select_related("author", "category")
        .order_by("-published_at")
    )
    return paginate(request, queryset, BlogListSerializer)


@api_view(["GET"])
@permission_classes([AllowAny])
def user_blogs(request, user_pk):
    queryset = Blog.objects.filter(author_id=user_pk)
    user = request.user
    if not (user.is_authenticated and user.can_modify(user_pk)):
        queryset = queryset.published()
    queryset = queryset.select_related("author", "category").order_by("-created_at")
    return paginate(request, queryset, BlogListSerializer)


@api_view(["GET"])
@permission_classes([AllowAny])
def blog_by_slug(request, slug):
    blog = get_object_or_404(Blog.objects.select_related("author", "category"), slug=slug)
    if not blog.is_visible_to(request.user):
        raise NotFound("Blog not found")

    blog.increment_views()
    return Response(BlogDetailSerializer(blog, context={"request": request}).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def upload_image(request):
    url, stored_name = store_image(request, "image")
    return Response(
        {"message": "Image uploaded successfully", "url": url, "filename": stored_name},
        status=status.HTTP_201_CREATED,
    )


# ----------------------------------------------------------------------
# 2. Category Views
# ----------------------------------------------------------------------


@api_view(["GET", "POST"])
@permission_classes([IsAdminOrReadOnly])
def category_list_create(request):
    """
    GET: List active categories.
    POST: Create a category (admin only).
    """
    if request.method == "GET":
        queryset = Category.objects.active().prefetch_related("subcategories")
        serializer = CategorySerializer(
            queryset, many=True, context={"with_subcategories": True}
        )
        return Response(serializer.data)

    elif request.method == "POST":
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        logger.info("Category %s created by user %s", category.pk, request.user.pk)
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([AllowAny])
def categories_with_counts(request):
    queryset = Category.objects.active().with_blog_count()
    return Response(CategorySerializer(queryset, many=True).data)


@api_view(["GET"])
@permission_classes([IsAdminRole])
def all_categories(request):
    queryset = Category.objects.with_blog_count().prefetch_related("subcategories")
    serializer = CategorySerializer(
        queryset,
        many=True,
        context={"with_subcategories": True, "include_inactive": True},
    )
    return Response(serializer.data)


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAdminOrReadOnly])
def category_detail(request, pk):
    category = get_object_or_404(Category, pk=pk)

    if request.method == "GET":
        if not category.is_active:
            raise NotFound("Category not found")
        return Response(CategorySerializer(category, context={"with_subcategories": True}).data)

    elif request.method in ["PUT", "PATCH"]:
        partial = request.method == "PATCH"
        serializer = CategorySerializer(category, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        return Response(CategorySerializer(category, context={"with_subcategories": True}).data)

    elif request.method == "DELETE":
        # Refused with a conflict while blogs or subcategories point at it
        category.delete()
        logger.info("Category %s deleted by user %s", pk, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@permission_classes([AllowAny])
def category_by_slug(request, slug):
    category = get_object_or_404(Category, slug=slug, is_active=True)
    return Response(CategorySerializer(category, context={"with_subcategories": True}).data)


@api_view(["PUT"])
@permission_classes([IsAdminRole])
def reorder_categories(request):
    """Body: {"categories": [{"id": 1, "order": 0}, ...]}"""
    serializer = CategoryReorderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        for item in serializer.validated_data["categories"]:
            Category.objects.filter(pk=item["id"]).update(order=item["order"])

    return Response({"message": "Categories reordered successfully"})


# ----------------------------------------------------------------------
# 3. Comment Views
# ----------------------------------------------------------------------


@api_view(["POST"])
@permission_classes([IsAuthenticated])  # Only authenticated users can create comments
def comment_create(request):
    """
    POST: Create a comment or a reply. The blog ID (and, for a reply, the
    parent comment ID) is provided in the request body.
    """
    serializer = CommentSerializer(data=request.data, context={"request": request})
    serializer.is_valid(raise_exception=True)
    comment = serializer.save(user=request.user)
    return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([AllowAny])
def blog_comments(request, blog_pk):
    blog = get_object_or_404(Blog, pk=blog_pk)
    if not blog.is_visible_to(request.user):
        raise NotFound("Blog not found")

    queryset = (
        blog.comments.top_level()
        .with_reply_count()
        .select_related("user")
        .order_by("-created_at")
    )
    return paginate(request, queryset, CommentSerializer)


@api_view(["GET"])
@permission_classes([AllowAny])
def comment_replies(request, pk):
    comment = get_object_or_404(Comment.objects.select_related("blog"), pk=pk)
    if not comment.blog.is_visible_to(request.user):
        raise NotFound("Comment not found")

    queryset = comment.replies.select_related("user").order_by("created_at", "id")
    return Response(CommentSerializer(queryset, many=True).data)


@api_view(["GET"])
@permission_classes([AllowAny])
def user_comments(request, user_pk):
    queryset = (
        Comment.objects.filter(user_id=user_pk, blog__in=Blog.objects.visible_to(request.user))
        .select_related("user")
        .order_by("-created_at")
    )
    return paginate(request, queryset, CommentSerializer)


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsOwnerOrAdmin])
def comment_detail(request, pk):
    """
    GET, PUT, PATCH, DELETE: Restricted to the comment's author or an admin.
    """
    comment = get_object_or_404(Comment, pk=pk)
    _check_owner(request, comment_detail, comment, "user")

    if request.method == "GET":
        return Response(CommentSerializer(comment).data)

    elif request.method in ["PUT", "PATCH"]:
        serializer = CommentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment.mark_edited(serializer.validated_data["text"])
        return Response(CommentSerializer(comment).data)

    elif request.method == "DELETE":
        # Direct replies and the likes on all of them are removed together
        with transaction.atomic():
            comment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
