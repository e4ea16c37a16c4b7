import logging

from django.conf import settings
from django.db import IntegrityError, models, transaction

logger = logging.getLogger(__name__)

LIKED = "liked"
UNLIKED = "unliked"


class TargetType(models.TextChoices):
    BLOG = "Blog", "Blog"
    COMMENT = "Comment", "Comment"


class LikeManager(models.Manager):
    def for_target(self, target_type, target_id):
        return self.filter(target_type=target_type, target_id=target_id)

    def toggle(self, user, target_type, target_id):
        """
        Flips the like of `user` on the target and returns LIKED or UNLIKED.

        The unique constraint on (user, target_type, target_id) decides
        concurrent double submissions: the insert that loses the race sees
        an IntegrityError and reports the like the winner created.
        """
        deleted, _ = self.filter(
            user=user, target_type=target_type, target_id=target_id
        ).delete()
        if deleted:
            return UNLIKED

        try:
            # Savepoint, so a duplicate does not break an outer transaction
            with transaction.atomic():
                self.create(user=user, target_type=target_type, target_id=target_id)
        except IntegrityError:
            logger.info(
                "Duplicate like by user %s on %s %s resolved as liked",
                user.pk,
                target_type,
                target_id,
            )
        return LIKED

    def count_for(self, target_type, target_id):
        # Counted on every call, never cached on the target
        return self.for_target(target_type, target_id).count()

    def is_liked_by(self, user, target_type, target_id):
        if user is None or not user.is_authenticated:
            return False
        return self.for_target(target_type, target_id).filter(user=user).exists()


class Like(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="likes"
    )
    # Blogs and comments share one table; the target is not a foreign key,
    # deleting a blog or comment removes its likes through post_delete receivers.
    target_type = models.CharField(max_length=10, choices=TargetType.choices)
    target_id = models.PositiveBigIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    objects = LikeManager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "target_type", "target_id"],
                name="unique_like_per_user_target",
            ),
        ]
        indexes = [
            models.Index(fields=["target_type", "target_id"], name="like_target_idx"),
        ]

    def __str__(self):
        return f"{self.user} likes {self.target_type} #{self.target_id}"
