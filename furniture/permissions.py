# 관리자/공급사/주문자 권한 관련 커스텀 권한 클래스를 정의합니다.

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


def is_order_manager(user) -> bool:
    """관리자(is_staff) 또는 공급사(is_supplier) 여부"""
    return bool(user and user.is_authenticated and (user.is_staff or getattr(user, "is_supplier", False)))


class IsAdminOrSupplier(permissions.BasePermission):
    """
    관리자 또는 공급사 권한 체크

    - 배송비 설정 변경, 주문 상태 변경, 주문 통계 조회에 사용

    사용 예시:
        permission_classes = [IsAdminOrSupplier]
    """

    message = "Only store staff or suppliers can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return is_order_manager(request.user)


class IsAdminOrSupplierOrReadOnly(IsAdminOrSupplier):
    """읽기 요청은 누구나, 쓰기 요청은 관리자/공급사만"""

    def has_permission(self, request: Request, view: APIView) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        return super().has_permission(request, view)


class IsStaffOrReadOnly(permissions.BasePermission):
    """읽기 요청은 누구나, 쓰기 요청은 관리자(is_staff)만"""

    message = "Only store staff can change settings."

    def has_permission(self, request: Request, view: APIView) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class IsOrderOwnerOrManager(permissions.BasePermission):
    """
    주문 객체 권한 체크

    - 본인 주문이거나 관리자/공급사인 경우에만 접근 허용
    """

    message = "You do not have access to this order."

    def has_object_permission(self, request: Request, view: APIView, obj: Any) -> bool:
        if is_order_manager(request.user):
            return True
        return obj.user_id is not None and obj.user_id == request.user.id
