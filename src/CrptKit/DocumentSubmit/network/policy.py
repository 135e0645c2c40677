# === NAVMAP v1 ===
# {
#   "module": "CrptKit.DocumentSubmit.network.policy",
#   "purpose": "HTTP policy constants and defaults.",
#   "sections": []
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Defines timeout budgets, connection pooling parameters, and the fixed shape of
the create-document call (path, query parameter, headers).
"""

# ============================================================================
# Timeout Budgets (seconds)
# ============================================================================

#: Default per-request timeout applied to each create-document call
HTTP_REQUEST_TIMEOUT = 30.0

#: Connection establishment timeout (TCP + TLS handshake)
HTTP_CONNECT_TIMEOUT = 10.0


# ============================================================================
# Connection Pooling
# ============================================================================

#: Maximum concurrent connections; the rate limiter bounds real concurrency
MAX_CONNECTIONS = 20

#: Idle connections kept open for reuse
MAX_KEEPALIVE_CONNECTIONS = 10

#: How long to keep idle connections alive (seconds)
KEEPALIVE_EXPIRY = 30.0


# ============================================================================
# Protocol
# ============================================================================

#: Registry endpoints speak HTTP/2; falls back to HTTP/1.1 if unsupported
HTTP2_ENABLED = True

#: Require verified TLS for every connection
TLS_VERIFY_ENABLED = True

#: Redirects are never followed for document creation
FOLLOW_REDIRECTS = False


# ============================================================================
# Create-document call
# ============================================================================

CREATE_DOCUMENT_PATH = "/lk/documents/create"
PRODUCT_GROUP_QUERY_PARAMETER = "pg"

HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_ACCEPT = "Accept"
AUTHORIZATION_SCHEME = "Bearer"
CONTENT_TYPE_JSON = "application/json"
ACCEPT_ANY = "*/*"

#: Success is any status in [HTTP_SUCCESS_MIN, HTTP_SUCCESS_MAX)
HTTP_SUCCESS_MIN = 200
HTTP_SUCCESS_MAX = 300

#: Production and demo ("sandbox") stands
PRODUCTION_BASE_URL = "https://ismp.crpt.ru/api/v3"
DEMO_BASE_URL = "https://markirovka.demo.crpt.tech/api/v3"


__all__ = [
    "HTTP_REQUEST_TIMEOUT",
    "HTTP_CONNECT_TIMEOUT",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "KEEPALIVE_EXPIRY",
    "HTTP2_ENABLED",
    "TLS_VERIFY_ENABLED",
    "FOLLOW_REDIRECTS",
    "CREATE_DOCUMENT_PATH",
    "PRODUCT_GROUP_QUERY_PARAMETER",
    "HEADER_AUTHORIZATION",
    "HEADER_CONTENT_TYPE",
    "HEADER_ACCEPT",
    "AUTHORIZATION_SCHEME",
    "CONTENT_TYPE_JSON",
    "ACCEPT_ANY",
    "HTTP_SUCCESS_MIN",
    "HTTP_SUCCESS_MAX",
    "PRODUCTION_BASE_URL",
    "DEMO_BASE_URL",
]
