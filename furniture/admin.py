from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import NotificationLog, Order, OrderItem, StoreSetting, User
from .services.order_service import OrderService, OrderServiceError
from .tasks.email_tasks import send_order_notification_task


# User Admin
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    사용자 관리자 페이지 설정
    - 공급사 승인(is_supplier) 체크 가능
    """

    list_display = ["username", "email", "full_name", "phone_number", "is_staff", "is_supplier", "is_active"]
    list_filter = ["is_active", "is_staff", "is_supplier", "date_joined"]
    search_fields = ["username", "email", "full_name", "phone_number"]
    ordering = ["-date_joined"]

    fieldsets = BaseUserAdmin.fieldsets + (
        ("eFurnish", {"fields": ("full_name", "phone_number", "is_supplier")}),
    )


class OrderItemInline(admin.TabularInline):
    """주문 상품 인라인 (주문 당시 스냅샷, 수정 불가)"""

    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = [
        "product_id",
        "product_name",
        "quantity",
        "unit_price",
        "discount_percentage",
        "customization_cost",
        "customization",
    ]

    def has_add_permission(self, request, obj=None):
        return False


# Order Admin
@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    주문 관리자 페이지 설정

    상태 변경은 OrderService를 거치는 액션으로만 가능 (전이 규칙 검증 + 안내 메일)
    """

    list_display = [
        "id",
        "user",
        "status",
        "payment_method",
        "shipping_municipality",
        "formatted_total_amount",
        "created_at",
    ]

    list_filter = ["status", "payment_method", "is_free_shipping", "created_at"]
    search_fields = ["id", "user__username", "user__email", "shipping_municipality"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    readonly_fields = [
        "user",
        "status",
        "status_reason",
        "status_updated_at",
        "payment_method",
        "shipping_address",
        "shipping_municipality",
        "subtotal",
        "discount_amount",
        "shipping_fee",
        "total_amount",
        "is_free_shipping",
        "change_needed",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        ("주문 정보", {"fields": ("user", "status", "status_reason", "status_updated_at")}),
        ("배송 정보", {"fields": ("shipping_address", "shipping_municipality", "order_memo")}),
        ("결제 정보", {"fields": ("payment_method", "payment_status", "change_needed")}),
        (
            "금액",
            {"fields": ("subtotal", "discount_amount", "shipping_fee", "is_free_shipping", "total_amount")},
        ),
        ("시간정보", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    inlines = [OrderItemInline]

    actions = [
        "mark_as_processing",
        "mark_as_shipped",
        "mark_as_delivered",
        "mark_as_cancelled",
        "mark_as_returned",
    ]

    def formatted_total_amount(self, obj):
        """금액을 페소 형식으로 표시"""
        return f"₱{obj.total_amount:,.2f}"

    formatted_total_amount.short_description = "최종 결제금액"
    formatted_total_amount.admin_order_field = "total_amount"

    def _transition_selected(self, request, queryset, new_status):
        changed = 0
        for order in queryset:
            try:
                OrderService.transition_status(order.id, new_status, changed_by=request.user)
                changed += 1
            except OrderServiceError as e:
                self.message_user(request, f"주문 #{order.id}: {e.message}", level=messages.WARNING)
        self.message_user(request, f"{changed}개 주문이 '{new_status}' 상태로 변경되었습니다.")

    def mark_as_processing(self, request, queryset):
        self._transition_selected(request, queryset, "processing")

    mark_as_processing.short_description = "선택된 주문을 처리중으로 변경"

    def mark_as_shipped(self, request, queryset):
        self._transition_selected(request, queryset, "shipped")

    mark_as_shipped.short_description = "선택된 주문을 배송중으로 변경"

    def mark_as_delivered(self, request, queryset):
        self._transition_selected(request, queryset, "delivered")

    mark_as_delivered.short_description = "선택된 주문을 배송완료로 변경"

    def mark_as_cancelled(self, request, queryset):
        self._transition_selected(request, queryset, "cancelled")

    mark_as_cancelled.short_description = "선택된 주문을 취소로 변경"

    def mark_as_returned(self, request, queryset):
        self._transition_selected(request, queryset, "returned")

    mark_as_returned.short_description = "선택된 주문을 반품으로 변경"


@admin.register(StoreSetting)
class StoreSettingAdmin(admin.ModelAdmin):
    """스토어 설정 관리"""

    list_display = ["key", "updated_at"]
    search_fields = ["key"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    """주문 알림 메일 발송 로그 관리"""

    list_display = [
        "id",
        "order",
        "notification_type",
        "recipient_email",
        "status_badge",
        "retry_count",
        "sent_at",
        "created_at",
    ]

    list_filter = ["notification_type", "status", "created_at"]
    search_fields = ["recipient_email", "subject", "order__id"]
    readonly_fields = ["payload", "error_message", "retry_count", "sent_at", "created_at", "updated_at"]
    ordering = ["-created_at"]

    actions = ["resend_notifications"]

    def status_badge(self, obj):
        colors = {"pending": "#f0ad4e", "sent": "#5cb85c", "failed": "#d9534f"}
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "#777"),
            obj.get_status_display(),
        )

    status_badge.short_description = "상태"

    def resend_notifications(self, request, queryset):
        """선택된 알림 재발송"""
        count = 0
        for notification_log in queryset.exclude(status="sent"):
            notification_log.mark_for_retry()
            send_order_notification_task.delay(notification_log.id)
            count += 1
        self.message_user(request, f"{count}건의 알림 재발송을 요청했습니다.")

    resend_notifications.short_description = "선택된 알림 재발송"
