from django.db.models import Q
from django_filters import rest_framework as filters

from .models.order import Order


class OrderFilter(filters.FilterSet):
    """
    주문 목록 필터

    - start_date / end_date: 주문일 범위 (YYYY-MM-DD, 양 끝 포함)
    - search: 고객 이름 부분 일치 또는 주문번호 일치
    """

    start_date = filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    search = filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = ["status", "payment_method"]

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset

        condition = Q(user__full_name__icontains=value)
        if value.lstrip("#").isdigit():
            condition |= Q(id=int(value.lstrip("#")))
        return queryset.filter(condition)
