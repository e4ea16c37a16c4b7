from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import ADMIN_REQUEST_REASON_MAX_LENGTH, Role, User


class ReviewerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "name", "email")
        read_only_fields = fields


class AdminRequestSerializer(serializers.Serializer):
    """The admin-request columns of a User, presented as one nested object."""

    status = serializers.CharField(source="admin_request_status")
    reason = serializers.CharField(source="admin_request_reason")
    requested_at = serializers.DateTimeField(source="admin_request_requested_at")
    reviewed_at = serializers.DateTimeField(source="admin_request_reviewed_at")
    reviewed_by = ReviewerSerializer(source="admin_request_reviewed_by")
    admin_message = serializers.CharField(source="admin_request_message")


class UserSerializer(serializers.ModelSerializer):
    admin_request = AdminRequestSerializer(source="*", read_only=True)

    # Define password explicitly as write-only for security and input control
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={"input_type": "password"},
    )

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "name",
            "role",
            "bio",
            "avatar",
            "website",
            "is_active",
            "created_at",
            "admin_request",
            "password",
        )
        read_only_fields = ["id", "role", "is_active", "created_at", "avatar"]

    def validate_email(self, value):
        value = value.strip().lower()
        existing = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("User already exists")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)

    def update(self, instance, validated_data):
        raw_password = validated_data.pop("password", None)
        if raw_password:
            instance.set_password(raw_password)
        return super().update(instance, validated_data)


class RegisterSerializer(UserSerializer):
    request_admin_access = serializers.BooleanField(write_only=True, required=False, default=False)
    admin_request_reason = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        max_length=ADMIN_REQUEST_REASON_MAX_LENGTH,
    )

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("request_admin_access", "admin_request_reason")

    def create(self, validated_data):
        # Handled by the view once the account exists
        validated_data.pop("request_admin_access", None)
        validated_data.pop("admin_request_reason", None)
        return super().create(validated_data)


class UserSerializerWithToken(UserSerializer):
    token = serializers.SerializerMethodField(read_only=True)
    refresh = serializers.SerializerMethodField(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("token", "refresh")

    def _refresh_token(self, obj):
        # One refresh token per serialization so access and refresh match
        if not hasattr(self, "_issued"):
            self._issued = {}
        if obj.pk not in self._issued:
            self._issued[obj.pk] = RefreshToken.for_user(obj)
        return self._issued[obj.pk]

    def get_token(self, obj):
        return str(self._refresh_token(obj).access_token)

    def get_refresh(self, obj):
        return str(self._refresh_token(obj))


class ProfileSerializer(serializers.ModelSerializer):
    """Public view of a user, with social counts."""

    follower_count = serializers.SerializerMethodField()
    following_count = serializers.SerializerMethodField()
    blog_count = serializers.SerializerMethodField()
    is_following = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "name",
            "role",
            "bio",
            "avatar",
            "website",
            "created_at",
            "follower_count",
            "following_count",
            "blog_count",
            "is_following",
        )
        read_only_fields = fields

    def get_follower_count(self, obj):
        return obj.followers.count()

    def get_following_count(self, obj):
        return obj.following.count()

    def get_blog_count(self, obj):
        return obj.blogs.filter(status="published").count()

    def get_is_following(self, obj):
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return False
        return request.user.following.filter(pk=obj.pk).exists()


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(style={"input_type": "password"})


class AdminRequestCreateSerializer(serializers.Serializer):
    # Blank reasons pass through; the model raises the proper error for them
    reason = serializers.CharField(
        allow_blank=True, required=False, default="", max_length=ADMIN_REQUEST_REASON_MAX_LENGTH
    )


class ReviewSerializer(serializers.Serializer):
    message = serializers.CharField(allow_blank=True, required=False, default="", max_length=500)


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[Role.USER, Role.ADMIN])


class ManagedUserSerializer(serializers.ModelSerializer):
    """What admins see when managing accounts."""

    admin_request = AdminRequestSerializer(source="*", read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "name",
            "role",
            "is_active",
            "login_count",
            "last_login",
            "created_at",
            "admin_request",
        )
        read_only_fields = fields


class ActivityUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "name", "email", "role", "created_at")
        read_only_fields = fields


class ActivityQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, default=20, min_value=1, max_value=100)
