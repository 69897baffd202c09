"""
스토어 설정 초기화 Management Command

배송비 설정(shipping_settings)이 없으면 기본값으로 생성합니다.
--reset 옵션을 주면 기존 값을 기본값으로 덮어씁니다.
"""

from django.core.management.base import BaseCommand

from furniture.models import StoreSetting
from furniture.services.shipping_service import (
    SHIPPING_SETTINGS_KEY,
    DatabaseShippingSettingsProvider,
    ShippingService,
)


class Command(BaseCommand):
    help = "배송비 설정(shipping_settings)을 기본값으로 생성합니다"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="이미 저장된 설정도 기본값으로 덮어쓰기",
        )

    def handle(self, *args, **options):
        reset = options["reset"]
        defaults = ShippingService.DEFAULT_SETTINGS
        exists = StoreSetting.objects.filter(key=SHIPPING_SETTINGS_KEY).exists()

        if exists and not reset:
            self.stdout.write(self.style.WARNING(f"'{SHIPPING_SETTINGS_KEY}' 설정이 이미 있습니다. (--reset으로 덮어쓰기)"))
            return

        DatabaseShippingSettingsProvider().update(defaults)

        self.stdout.write(self.style.SUCCESS(f"'{SHIPPING_SETTINGS_KEY}' 설정을 {'초기화' if exists else '생성'}했습니다."))
        self.stdout.write(f"무료배송 지역: {', '.join(defaults.free_shipping_areas)}")
        self.stdout.write(f"기본 배송비: {defaults.standard_shipping_fee}")
