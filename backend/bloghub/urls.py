from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path

from blogs.urls import category_urlpatterns, comment_urlpatterns
from blogs.views import upload_image
from users.urls import admin_request_urlpatterns, admin_urlpatterns

urlpatterns = [
    path("api/users/", include("users.urls")),
    path("api/admin-request/", include(admin_request_urlpatterns)),
    path("api/admin/", include(admin_urlpatterns)),
    path("api/blogs/", include("blogs.urls")),
    path("api/categories/", include(category_urlpatterns)),
    path("api/comments/", include(comment_urlpatterns)),
    path("api/likes/", include("likes.urls")),
    path("api/upload/image/", upload_image, name="upload-image"),
]

# Uploaded files are served by Django only in development
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
