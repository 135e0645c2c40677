# === NAVMAP v1 ===
# {
#   "module": "CrptKit.DocumentSubmit.ratelimit.__init__",
#   "purpose": "Fixed-window admission control for registry submissions.",
#   "sections": []
# }
# === /NAVMAP ===

"""Fixed-window admission control for registry submissions.

Modules:
- config: window units and quota parsing
- limiter: RateLimiter with a FIFO permit pool and periodic top-up

Example:
    >>> from CrptKit.DocumentSubmit.ratelimit import RateLimiter, WindowUnit
    >>> limiter = RateLimiter(capacity=10, window=WindowUnit.SECOND)
    >>> limiter.acquire()
    >>> limiter.shutdown()
"""

from CrptKit.DocumentSubmit.ratelimit.config import WindowUnit, parse_quota, window_seconds
from CrptKit.DocumentSubmit.ratelimit.limiter import RateLimiter

__all__ = [
    "RateLimiter",
    "WindowUnit",
    "parse_quota",
    "window_seconds",
]
