from rest_framework.pagination import PageNumberPagination

from training_app.utils import envelope


class EnvelopePagination(PageNumberPagination):
    """``?page=&pageSize=`` paging rendered as ``{total, page, pageSize, list}``."""
    page_size_query_param = "pageSize"
    max_page_size = 100

    def get_paginated_response(self, data):
        return envelope({
            "total": self.page.paginator.count,
            "page": self.page.number,
            "pageSize": self.get_page_size(self.request),
            "list": data,
        })


class CourseItemPagination(EnvelopePagination):
    page_size = 20
