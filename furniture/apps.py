from django.apps import AppConfig


class FurnitureConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "furniture"
    verbose_name = "eFurnish 주문/배송"
