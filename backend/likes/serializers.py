from rest_framework import serializers

from blogs.serializers import AuthorSerializer
from .models import Like


class LikeSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)

    class Meta:
        model = Like
        fields = ("id", "user", "target_type", "target_id", "created_at")
        read_only_fields = fields
