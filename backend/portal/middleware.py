import logging
import time

from django.conf import settings

logger = logging.getLogger('django.request')


class SlowRequestLoggingMiddleware:
    """Warns about API calls slower than `SLOW_REQUEST_LOG_MS`."""

    def __init__(self, get_response):
        self.get_response = get_response
        self.enabled = getattr(settings, 'SLOW_REQUEST_LOG_ENABLED', True)
        self.threshold_ms = int(getattr(settings, 'SLOW_REQUEST_LOG_MS', 1200))

    def __call__(self, request):
        if not self.enabled:
            return self.get_response(request)

        started = time.perf_counter()
        response = self.get_response(request)
        duration_ms = round((time.perf_counter() - started) * 1000.0, 2)
        if duration_ms < self.threshold_ms:
            return response

        # DRF copies the authenticated SessionUser back onto the HttpRequest.
        user = getattr(request, 'user', None)
        match = getattr(request, 'resolver_match', None)
        logger.warning('%s', {
            'event': 'slow_request',
            'method': request.method,
            'path': request.path,
            'view': match.view_name if match else None,
            'status': getattr(response, 'status_code', None),
            'duration_ms': duration_ms,
            'user_id': getattr(user, 'id', None) if getattr(user, 'is_authenticated', False) else None,
        })
        return response
