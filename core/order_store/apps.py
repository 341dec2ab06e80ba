"""
Handover Core — Order Store App Configuration
===============================================
Django ORM persistence for orders, disputes, reviews and
notifications.

This app:
- Defines the tables behind DjangoStore
- Enforces one review per order at the database level
- Carries a version column for compare-and-set writes

This app does NOT:
- Decide transitions (that is the engines' job)
- Publish events
"""

from django.apps import AppConfig


class OrderStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.order_store"
    label = "order_store"
    verbose_name = "Handover Order Store"
