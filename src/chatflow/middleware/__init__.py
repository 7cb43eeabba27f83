"""HTTP middleware: request size validation and security headers."""

from chatflow.middleware.request_size import request_size_validator
from chatflow.middleware.security_headers import security_headers_middleware

__all__ = ["request_size_validator", "security_headers_middleware"]
