import logging
from datetime import timedelta

from django.contrib.auth import authenticate
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from bloghub.exceptions import InvalidStateError
from bloghub.pagination import paginate
from bloghub.uploads import store_image
from blogs.models import Blog, BlogStatus
from blogs.serializers import BlogActivitySerializer, BlogListSerializer
from .models import AdminRequestStatus, Role, User
from .permissions import IsAdminRole, IsSuperAdmin
from .serializers import (
    ActivityQuerySerializer,
    ActivityUserSerializer,
    AdminRequestCreateSerializer,
    AdminRequestSerializer,
    LoginSerializer,
    ManagedUserSerializer,
    ProfileSerializer,
    RegisterSerializer,
    ReviewSerializer,
    RoleUpdateSerializer,
    UserSerializer,
    UserSerializerWithToken,
)

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# 1. Authentication
# ----------------------------------------------------------------------


@api_view(["POST"])
@permission_classes([AllowAny])  # Allows unauthenticated access for registration
def register_user(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info("Registered user %s", user.pk)

    message = "Account created successfully."
    reason = serializer.validated_data.get("admin_request_reason")
    if serializer.validated_data.get("request_admin_access") and reason:
        try:
            user.request_admin_access(reason)
            message = (
                "Account created successfully. "
                "Your admin access request has been submitted for review."
            )
        except (ValidationError, PermissionDenied, InvalidStateError) as exc:
            # The account stays; only the request is dropped
            logger.warning("Admin request at registration failed for %s: %s", user.pk, exc)

    data = dict(UserSerializerWithToken(user).data)
    data["message"] = message
    return Response(data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
def login_user(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate(
        request,
        email=serializer.validated_data["email"].lower(),
        password=serializer.validated_data["password"],
    )
    if user is None:
        raise ValidationError("Invalid credentials")

    # An admin whose request was never approved cannot sign in as admin
    if not user.is_authorized_for_role():
        logger.warning(
            "Login refused for %s (role=%s, request=%s)",
            user.pk,
            user.role,
            user.admin_request_status,
        )
        raise PermissionDenied(user.login_denied_message())

    user.last_login = timezone.now()
    user.login_count += 1
    user.save(update_fields=["last_login", "login_count"])
    logger.info("User %s logged in", user.pk)

    return Response(UserSerializerWithToken(user).data)


# ----------------------------------------------------------------------
# 2. Own account
# ----------------------------------------------------------------------


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def user_profile(request):
    """
    GET: the current session's user (also used to validate a token).
    PUT/PATCH: update own profile.
    DELETE: delete own account with everything it authored.
    """
    user = request.user

    if request.method == "GET":
        return Response(UserSerializer(user).data)

    elif request.method in ["PUT", "PATCH"]:
        serializer = UserSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    elif request.method == "DELETE":
        if user.role == Role.SUPERADMIN:
            raise PermissionDenied("The superadmin account cannot be deleted")
        user_id = user.pk
        # Follow rows, blogs (with comments and likes), comments and likes go too
        user.delete()
        logger.info("User %s deleted their account", user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def upload_avatar(request):
    url, _ = store_image(request, "avatar", folder="avatars")
    request.user.avatar = url
    request.user.save(update_fields=["avatar", "updated_at"])
    return Response({"message": "Avatar uploaded successfully", "avatar": url})


# ----------------------------------------------------------------------
# 3. Public profiles, following and bookmarks
# ----------------------------------------------------------------------


@api_view(["GET"])
@permission_classes([AllowAny])
def user_detail(request, pk):
    user = get_object_or_404(User, pk=pk, is_active=True)
    return Response(ProfileSerializer(user, context={"request": request}).data)


@api_view(["POST", "DELETE"])
@permission_classes([IsAuthenticated])
def follow_user(request, pk):
    target = get_object_or_404(User, pk=pk, is_active=True)
    if target.pk == request.user.pk:
        raise ValidationError("You cannot follow yourself")

    if request.method == "POST":
        # add() ignores a relation that already exists
        request.user.following.add(target)
        message = f"You are now following {target.name}"
    else:
        request.user.following.remove(target)
        message = f"You unfollowed {target.name}"

    return Response(
        {
            "message": message,
            "is_following": request.method == "POST",
            "follower_count": target.followers.count(),
        }
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def user_followers(request, pk):
    user = get_object_or_404(User, pk=pk)
    return paginate(
        request, user.followers.order_by("name"), ProfileSerializer, context={"request": request}
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def user_following(request, pk):
    user = get_object_or_404(User, pk=pk)
    return paginate(
        request, user.following.order_by("name"), ProfileSerializer, context={"request": request}
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def bookmark_list(request):
    queryset = request.user.bookmarks.visible_to(request.user).select_related(
        "author", "category"
    )
    return paginate(request, queryset, BlogListSerializer)


@api_view(["POST", "DELETE"])
@permission_classes([IsAuthenticated])
def bookmark_detail(request, blog_pk):
    blog = get_object_or_404(Blog, pk=blog_pk)

    if request.method == "POST":
        if not blog.is_visible_to(request.user):
            raise PermissionDenied("You cannot bookmark this blog")
        request.user.bookmarks.add(blog)
        return Response({"message": "Blog bookmarked", "is_bookmarked": True})

    request.user.bookmarks.remove(blog)
    return Response({"message": "Bookmark removed", "is_bookmarked": False})


# ----------------------------------------------------------------------
# 4. Admin-access requests
# ----------------------------------------------------------------------


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def request_admin_access(request):
    serializer = AdminRequestCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    user.request_admin_access(serializer.validated_data["reason"])
    return Response(
        {
            "message": "Admin access request submitted successfully",
            "admin_request": AdminRequestSerializer(user).data,
        }
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def admin_request_status(request):
    return Response(
        {
            "role": request.user.role,
            "admin_request": AdminRequestSerializer(request.user).data,
        }
    )


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
def cancel_admin_request(request):
    request.user.cancel_admin_request()
    return Response(
        {
            "message": "Admin request cancelled successfully",
            "admin_request": AdminRequestSerializer(request.user).data,
        }
    )


@api_view(["GET"])
@permission_classes([IsSuperAdmin])
def pending_admin_requests(request):
    queryset = User.objects.filter(
        admin_request_status=AdminRequestStatus.PENDING
    ).order_by("admin_request_requested_at")
    return Response(ManagedUserSerializer(queryset, many=True).data)


@api_view(["GET"])
@permission_classes([IsSuperAdmin])
def admin_request_history(request):
    queryset = (
        User.objects.exclude(admin_request_status=AdminRequestStatus.NONE)
        .select_related("admin_request_reviewed_by")
        .order_by("-admin_request_requested_at")
    )
    return Response(ManagedUserSerializer(queryset, many=True).data)


def _review_admin_request(request, pk, action, message):
    target = get_object_or_404(User, pk=pk)
    serializer = ReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    getattr(target, action)(request.user, serializer.validated_data["message"])
    return Response({"message": message, "user": ManagedUserSerializer(target).data})


@api_view(["PUT"])
@permission_classes([IsSuperAdmin])
def approve_admin_request(request, pk):
    return _review_admin_request(
        request, pk, "approve_admin_request", "Admin request approved successfully"
    )


@api_view(["PUT"])
@permission_classes([IsSuperAdmin])
def reject_admin_request(request, pk):
    return _review_admin_request(request, pk, "reject_admin_request", "Admin request rejected")


@api_view(["PUT"])
@permission_classes([IsSuperAdmin])
def revoke_admin_access(request, pk):
    return _review_admin_request(
        request, pk, "revoke_admin_access", "Admin access revoked successfully"
    )


# ----------------------------------------------------------------------
# 5. User administration
# ----------------------------------------------------------------------


@api_view(["GET"])
@permission_classes([IsAdminRole])  # Restricts access to approved admins and the superadmin
def get_users(request):
    queryset = User.objects.manageable_by(request.user).order_by("-created_at")
    return paginate(request, queryset, ManagedUserSerializer)


@api_view(["GET", "DELETE"])
@permission_classes([IsAdminRole])
def managed_user_detail(request, pk):
    user = get_object_or_404(User, pk=pk)

    if not request.user.can_manage(user):
        raise PermissionDenied("Not authorized to manage this user")

    if request.method == "GET":
        return Response(ManagedUserSerializer(user).data)

    elif request.method == "DELETE":
        user.delete()
        logger.info("User %s deleted by %s", pk, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["PUT"])
@permission_classes([IsSuperAdmin])
def update_user_role(request, pk):
    user = get_object_or_404(User, pk=pk)
    serializer = RoleUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user.set_role(request.user, serializer.validated_data["role"])
    return Response(
        {"message": "User role updated successfully", "user": ManagedUserSerializer(user).data}
    )


@api_view(["GET"])
@permission_classes([IsAdminRole])
def analytics(request):
    week_ago = timezone.now() - timedelta(days=7)
    users = User.objects.manageable_by(request.user)

    user_stats = users.aggregate(
        total_users=Count("id"),
        active_users=Count("id", filter=Q(is_active=True)),
        recent_users=Count("id", filter=Q(created_at__gte=week_ago)),
        total_admins=Count("id", filter=Q(role=Role.ADMIN)),
    )
    blog_stats = Blog.objects.aggregate(
        total_blogs=Count("id"),
        published_blogs=Count("id", filter=Q(status=BlogStatus.PUBLISHED)),
        draft_blogs=Count("id", filter=Q(status=BlogStatus.DRAFT)),
        recent_blogs=Count("id", filter=Q(created_at__gte=week_ago)),
    )
    top_authors = (
        User.objects.annotate(blog_count=Count("blogs"))
        .filter(blog_count__gt=0)
        .order_by("-blog_count")
        .values("id", "name", "email", "blog_count")[:10]
    )

    return Response(
        {
            "user_stats": user_stats,
            "blog_stats": blog_stats,
            "top_authors": list(top_authors),
        }
    )


@api_view(["GET"])
@permission_classes([IsAdminRole])
def recent_activity(request):
    """Newest registrations (scoped like the user list) and blog creations, merged."""
    query = ActivityQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    limit = query.validated_data["limit"]

    users = User.objects.manageable_by(request.user).order_by("-created_at")[:limit]
    blogs = Blog.objects.select_related("author").order_by("-created_at")[:limit]

    activity = [
        {
            "type": "user_registration",
            "data": ActivityUserSerializer(user).data,
            "timestamp": user.created_at,
        }
        for user in users
    ]
    activity += [
        {
            "type": "blog_created",
            "data": BlogActivitySerializer(blog).data,
            "timestamp": blog.created_at,
        }
        for blog in blogs
    ]
    activity.sort(key=lambda item: item["timestamp"], reverse=True)
    return Response(activity[:limit])
