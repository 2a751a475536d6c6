"""
URL routing for payment endpoints.
"""

from django.urls import path

from apps.web.payments import webhooks

app_name = "payments"

urlpatterns = [
    path("webhooks/yoco", webhooks.yoco_webhook, name="yoco-webhook"),
]
