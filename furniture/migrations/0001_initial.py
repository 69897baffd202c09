import decimal

import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={"unique": "A user with that username already exists."},
                        help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
                        max_length=150,
                        unique=True,
                        validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                        verbose_name="username",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Designates whether this user should be treated as active. "
                        "Unselect this instead of deleting accounts.",
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                (
                    "full_name",
                    models.CharField(
                        blank=True, help_text="주문 안내 메일에 표시되는 이름", max_length=150, verbose_name="이름"
                    ),
                ),
                (
                    "phone_number",
                    models.CharField(
                        blank=True,
                        max_length=15,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="Enter a mobile number like '09171234567' or '+639171234567'.",
                                regex="^(\\+63|0)9\\d{9}$",
                            )
                        ],
                        verbose_name="전화번호",
                    ),
                ),
                (
                    "is_supplier",
                    models.BooleanField(
                        default=False,
                        help_text="체크 시 공급사 포털에서 배송비 설정 및 주문 상태 변경 권한 부여",
                        verbose_name="공급사 여부",
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions "
                        "granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "verbose_name": "사용자",
                "verbose_name_plural": "사용자 목록",
                "db_table": "furniture_users",
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="StoreSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True, verbose_name="설정 키")),
                ("value", models.JSONField(default=dict, verbose_name="설정 값")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일시")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일시")),
            ],
            options={
                "verbose_name": "스토어 설정",
                "verbose_name_plural": "스토어 설정 목록",
                "db_table": "furniture_settings",
                "ordering": ["key"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "주문접수"),
                            ("processing", "처리중"),
                            ("shipped", "배송중"),
                            ("delivered", "배송완료"),
                            ("cancelled", "주문취소"),
                            ("returned", "반품완료"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="주문상태",
                    ),
                ),
                (
                    "status_reason",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="취소/반품 사유 등 고객 안내 메일에 포함되는 문구",
                        verbose_name="상태 변경 사유",
                    ),
                ),
                ("status_updated_at", models.DateTimeField(blank=True, null=True, verbose_name="상태 변경일시")),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("cod", "Cash on Delivery"), ("online", "Online Payment")],
                        default="cod",
                        max_length=20,
                        verbose_name="결제방법",
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "결제대기"), ("paid", "결제완료")],
                        default="pending",
                        max_length=20,
                        verbose_name="결제상태",
                    ),
                ),
                ("shipping_address", models.JSONField(default=dict, verbose_name="배송 주소")),
                (
                    "shipping_municipality",
                    models.CharField(
                        default="other",
                        help_text="배송비 산정에 사용된 municipality (매칭 실패 시 'other')",
                        max_length=100,
                        verbose_name="배송 지역(시/군)",
                    ),
                ),
                (
                    "subtotal",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="상품 합계",
                    ),
                ),
                (
                    "discount_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="할인 금액",
                    ),
                ),
                (
                    "shipping_fee",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="배송비",
                    ),
                ),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        help_text="상품 합계 - 할인 금액 + 배송비",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="최종 결제금액",
                    ),
                ),
                ("is_free_shipping", models.BooleanField(default=False, verbose_name="무료배송 여부")),
                (
                    "change_needed",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="거스름돈 요청 금액",
                    ),
                ),
                ("order_memo", models.TextField(blank=True, default="", verbose_name="주문메모")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="주문일시")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일시")),
                (
                    "user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="주문자",
                    ),
                ),
            ],
            options={
                "verbose_name": "주문",
                "verbose_name_plural": "주문 목록",
                "db_table": "furniture_orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "-created_at"], name="order_status_created_idx"),
                    models.Index(fields=["user", "-created_at"], name="order_user_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_id", models.CharField(blank=True, default="", max_length=64, verbose_name="상품 ID")),
                ("product_name", models.CharField(max_length=255, verbose_name="상품명(주문당시)")),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="수량",
                    ),
                ),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="단가(주문당시)",
                    ),
                ),
                (
                    "discount_percentage",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0")),
                            django.core.validators.MaxValueValidator(decimal.Decimal("100")),
                        ],
                        verbose_name="할인율(%)",
                    ),
                ),
                (
                    "customization_cost",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="커스터마이징 비용(개당)",
                    ),
                ),
                ("customization", models.JSONField(blank=True, default=dict, verbose_name="커스터마이징 옵션")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="order_items",
                        to="furniture.order",
                        verbose_name="주문",
                    ),
                ),
            ],
            options={
                "verbose_name": "주문 상품",
                "verbose_name_plural": "주문 상품 목록",
                "db_table": "furniture_order_items",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="NotificationLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "notification_type",
                    models.CharField(
                        choices=[("order_confirmation", "주문 확인"), ("order_status_update", "주문 상태 변경")],
                        max_length=30,
                        verbose_name="알림 유형",
                    ),
                ),
                (
                    "recipient_email",
                    models.EmailField(blank=True, db_index=True, max_length=254, verbose_name="수신자 이메일"),
                ),
                ("subject", models.CharField(max_length=255, verbose_name="제목")),
                ("payload", models.JSONField(default=dict, verbose_name="발송 데이터")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "대기중"), ("sent", "발송완료"), ("failed", "발송실패")],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="상태",
                    ),
                ),
                ("retry_count", models.PositiveIntegerField(default=0, verbose_name="재시도 횟수")),
                ("error_message", models.TextField(blank=True, default="", verbose_name="에러 메시지")),
                ("sent_at", models.DateTimeField(blank=True, null=True, verbose_name="발송일시")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="생성일시")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="수정일시")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notification_logs",
                        to="furniture.order",
                        verbose_name="주문",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="notification_logs",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="수신 사용자",
                    ),
                ),
            ],
            options={
                "verbose_name": "알림 발송 로그",
                "verbose_name_plural": "알림 발송 로그 목록",
                "db_table": "furniture_notification_logs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="notif_status_created_idx"),
                ],
            },
        ),
    ]
