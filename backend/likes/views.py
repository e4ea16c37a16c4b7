import logging

from django.db.models import Count
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotAuthenticated, NotFound, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from bloghub.pagination import paginate
from blogs.models import Blog, Comment
from users.permissions import IsAdminRole
from .models import LIKED, Like, TargetType
from .serializers import LikeSerializer

logger = logging.getLogger(__name__)


def _target_type(value):
    """Maps the URL segment ("blog", "Blog", "comment", ...) to a TargetType."""
    for choice in TargetType:
        if value.lower() == choice.value.lower():
            return choice
    raise ValidationError("Invalid target type. Must be Blog or Comment")


def _get_target(request, target_type, pk):
    if target_type == TargetType.BLOG:
        blog = Blog.objects.filter(pk=pk).first()
        if blog is None or not blog.is_visible_to(request.user):
            raise NotFound("Blog not found")
        return blog

    comment = Comment.objects.select_related("blog").filter(pk=pk).first()
    if comment is None or not comment.blog.is_visible_to(request.user):
        raise NotFound("Comment not found")
    return comment


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def like_target(request, target_type, pk):
    """
    GET: List the users who liked the blog or comment (public).
    POST: Toggle the caller's like (authenticated users).
    """
    target_type = _target_type(target_type)

    if request.method == "GET":
        _get_target(request, target_type, pk)
        queryset = Like.objects.for_target(target_type, pk).select_related("user")
        return paginate(request, queryset, LikeSerializer)

    elif request.method == "POST":
        if not request.user.is_authenticated:
            raise NotAuthenticated()

        _get_target(request, target_type, pk)
        action = Like.objects.toggle(request.user, target_type, pk)
        logger.debug("User %s %s %s %s", request.user.pk, action, target_type, pk)
        return Response(
            {
                "action": action,
                "is_liked": action == LIKED,
                "like_count": Like.objects.count_for(target_type, pk),
            }
        )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def check_like(request, target_type, pk):
    target_type = _target_type(target_type)
    return Response(
        {
            "is_liked": Like.objects.is_liked_by(request.user, target_type, pk),
            "like_count": Like.objects.count_for(target_type, pk),
        }
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def user_likes(request, user_pk):
    queryset = Like.objects.filter(user_id=user_pk).select_related("user")
    target_type = request.query_params.get("type")
    if target_type:
        queryset = queryset.filter(target_type=_target_type(target_type))
    return paginate(request, queryset, LikeSerializer)


@api_view(["GET"])
@permission_classes([IsAdminRole])
def like_stats(request):
    by_type = {choice.value: 0 for choice in TargetType}
    for row in Like.objects.values("target_type").annotate(count=Count("id")):
        by_type[row["target_type"]] = row["count"]

    top = list(
        Like.objects.filter(target_type=TargetType.BLOG)
        .values("target_id")
        .annotate(like_count=Count("id"))
        .order_by("-like_count", "target_id")[:10]
    )
    titles = dict(
        Blog.objects.filter(pk__in=[row["target_id"] for row in top]).values_list("id", "title")
    )
    top_blogs = [
        {"id": row["target_id"], "title": titles.get(row["target_id"]), "like_count": row["like_count"]}
        for row in top
    ]

    return Response(
        {
            "total_likes": sum(by_type.values()),
            "by_type": by_type,
            "top_blogs": top_blogs,
        }
    )
