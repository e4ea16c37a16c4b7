from django.urls import path

from .views import check_like, like_stats, like_target, user_likes

urlpatterns = [
    # Endpoint: /api/likes/stats/
    # Methods: GET (Admin only)
    path("stats/", like_stats, name="like-stats"),
    path("check/<str:target_type>/<int:pk>/", check_like, name="like-check"),
    path("user/<int:user_pk>/", user_likes, name="like-by-user"),
    # Endpoint: /api/likes/<blog|comment>/<int:pk>/
    # Methods: GET (Likers - public), POST (Toggle like - Authenticated users)
    path("<str:target_type>/<int:pk>/", like_target, name="like-target"),
]
