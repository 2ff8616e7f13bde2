"""Request pipeline middleware."""

from pantry_chef.core.middleware.content_type import ContentTypeMiddleware
from pantry_chef.core.middleware.logging import LoggingMiddleware
from pantry_chef.core.middleware.rate_limit import RateLimitMiddleware
from pantry_chef.core.middleware.request_id import RequestIDMiddleware
from pantry_chef.core.middleware.sanitize import SanitizeMiddleware
from pantry_chef.core.middleware.security_headers import SecurityHeadersMiddleware
from pantry_chef.core.middleware.timeout import TimeoutMiddleware


__all__ = [
    "ContentTypeMiddleware",
    "LoggingMiddleware",
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "SanitizeMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
