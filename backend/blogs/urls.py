from django.urls import path

from .views import (
    all_categories,
    blog_by_slug,
    blog_comments,
    blog_detail,
    blog_list_create,
    categories_with_counts,
    category_by_slug,
    category_detail,
    category_list_create,
    comment_create,
    comment_detail,
    comment_replies,
    featured_blogs,
    reorder_categories,
    user_blogs,
    user_comments,
)

urlpatterns = [
    # ----------------------------------------------------------------------
    # Endpoint: /api/blogs/
    # Methods: GET (List visible blogs), POST (Create blog - Authenticated users)
    path("", blog_list_create, name="blog-list-create"),
    path("featured/", featured_blogs, name="blog-featured"),
    path("user/<int:user_pk>/", user_blogs, name="blog-by-user"),
    path("slug/<slug:slug>/", blog_by_slug, name="blog-by-slug"),
    # ----------------------------------------------------------------------
    # Endpoint: /api/blogs/<int:pk>/
    # Methods: GET (Retrieve), PUT/PATCH/DELETE (Author or Admin)
    path("<int:pk>/", blog_detail, name="blog-detail"),
]

category_urlpatterns = [
    # Endpoint: /api/categories/
    # Methods: GET (Active categories), POST (Create - Admin only)
    path("", category_list_create, name="category-list-create"),
    path("with-counts/", categories_with_counts, name="category-with-counts"),
    path("admin/all/", all_categories, name="category-admin-all"),
    path("reorder/", reorder_categories, name="category-reorder"),
    path("slug/<slug:slug>/", category_by_slug, name="category-by-slug"),
    # Methods: GET (Retrieve), PUT/PATCH/DELETE (Admin only)
    path("<int:pk>/", category_detail, name="category-detail"),
]

comment_urlpatterns = [
    # Endpoint: /api/comments/
    # Methods: POST (Create comment or reply - Authenticated users only)
    path("", comment_create, name="comment-create"),
    path("blog/<int:blog_pk>/", blog_comments, name="comment-by-blog"),
    path("user/<int:user_pk>/", user_comments, name="comment-by-user"),
    path("<int:pk>/replies/", comment_replies, name="comment-replies"),
    # Methods: GET, PUT, PATCH and DELETE (Author or Admin only)
    path("<int:pk>/", comment_detail, name="comment-detail"),
]
