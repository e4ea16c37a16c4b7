import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from likes.models import Like, TargetType
from .models import Blog, Comment

logger = logging.getLogger(__name__)


# Likes point at their target by id only, so they are removed here. The
# receivers also run for rows removed by a cascade (a blog's comments, a
# deleted user's blogs) and share the transaction of the delete that
# triggered them.


@receiver(post_delete, sender=Blog)
def delete_blog_likes(sender, instance, **kwargs):
    deleted, _ = Like.objects.for_target(TargetType.BLOG, instance.pk).delete()
    logger.info("Blog %s deleted with %s like(s)", instance.pk, deleted)


@receiver(post_delete, sender=Comment)
def delete_comment_likes(sender, instance, **kwargs):
    Like.objects.for_target(TargetType.COMMENT, instance.pk).delete()
