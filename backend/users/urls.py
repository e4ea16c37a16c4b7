from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    admin_request_history,
    admin_request_status,
    analytics,
    recent_activity,
    approve_admin_request,
    bookmark_detail,
    bookmark_list,
    cancel_admin_request,
    follow_user,
    get_users,
    login_user,
    managed_user_detail,
    pending_admin_requests,
    register_user,
    reject_admin_request,
    request_admin_access,
    revoke_admin_access,
    update_user_role,
    upload_avatar,
    user_detail,
    user_followers,
    user_following,
    user_profile,
)

urlpatterns = [
    path("register/", register_user, name="register"),
    # Login checks the admin-approval gate before issuing tokens
    path("login/", login_user, name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("me/", user_profile, name="me"),
    path("me/avatar/", upload_avatar, name="me-avatar"),
    path("me/bookmarks/", bookmark_list, name="bookmark-list"),
    path("me/bookmarks/<int:blog_pk>/", bookmark_detail, name="bookmark-detail"),
    path("<int:pk>/", user_detail, name="user-detail"),
    path("<int:pk>/follow/", follow_user, name="user-follow"),
    path("<int:pk>/followers/", user_followers, name="user-followers"),
    path("<int:pk>/following/", user_following, name="user-following"),
]

# Mounted at /api/admin-request/
admin_request_urlpatterns = [
    path("", request_admin_access, name="admin-request"),
    path("status/", admin_request_status, name="admin-request-status"),
    path("cancel/", cancel_admin_request, name="admin-request-cancel"),
    path("pending/", pending_admin_requests, name="admin-request-pending"),
    path("history/", admin_request_history, name="admin-request-history"),
    path("<int:pk>/approve/", approve_admin_request, name="admin-request-approve"),
    path("<int:pk>/reject/", reject_admin_request, name="admin-request-reject"),
    path("<int:pk>/revoke/", revoke_admin_access, name="admin-request-revoke"),
]

# Mounted at /api/admin/
admin_urlpatterns = [
    path("users/", get_users, name="admin-users"),
    path("users/<int:pk>/", managed_user_detail, name="admin-user-detail"),
    path("users/<int:pk>/role/", update_user_role, name="admin-user-role"),
    path("analytics/", analytics, name="admin-analytics"),
    path("activity/", recent_activity, name="admin-activity"),
]
