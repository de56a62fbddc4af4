# ===============================================================================
# API PAGINATION CLASSES 📄
# ===============================================================================

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Consistent page sizes across list endpoints"""

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
