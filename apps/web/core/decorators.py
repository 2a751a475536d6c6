"""
Decorators for request handling and validation.
"""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.core.cache import cache
from django.http import HttpRequest, JsonResponse

IDEMPOTENCY_TTL_SECONDS = 86400  # 24 hours


def idempotency_key_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that requires an Idempotency-Key header for POST requests.

    If the same key is reused by the same user on the same path, the cached
    response from the first request is returned instead of running the view
    again, with the CORS headers of the original. Only successful responses
    are cached, so a failed checkout can be retried with the same key.

    Usage:
        @idempotency_key_required
        def create_checkout(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("Idempotency-Key")

        if not key:
            return JsonResponse(
                {"error": "Idempotency-Key header is required"},
                status=400,
            )

        cache_key = f"idempotency:{request.user.pk}:{request.path}:{key}"
        cached = cache.get(cache_key)

        if cached:
            replay = JsonResponse(
                cached["data"],
                status=cached["status"],
            )
            for header, value in cached.get("headers", {}).items():
                replay[header] = value
            return replay

        response = view_func(request, *args, **kwargs)

        if response.status_code < 400:
            cache.set(
                cache_key,
                {
                    "data": json.loads(response.content),
                    "status": response.status_code,
                    "headers": {
                        header: value
                        for header, value in response.items()
                        if header.lower().startswith("access-control-")
                    },
                },
                timeout=IDEMPOTENCY_TTL_SECONDS,
            )

        return response

    return wrapper


def login_required_json(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Like django's login_required, but answers API callers with a JSON 401
    instead of redirecting to a login page.
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required"}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapper
