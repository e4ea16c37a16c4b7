from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """Page-number pagination driven by ?page= and ?limit=."""

    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response(
            {
                "results": data,
                "current_page": self.page.number,
                "total_pages": self.page.paginator.num_pages,
                "total": self.page.paginator.count,
            }
        )


def paginate(request, queryset, serializer_class, **serializer_kwargs):
    """Paginate a queryset inside a function-based view and build the response."""
    paginator = StandardPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = serializer_class(page, many=True, **serializer_kwargs)
    return paginator.get_paginated_response(serializer.data)
