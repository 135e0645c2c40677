"""Shared fixtures for registry client tests.

All HTTP traffic goes through ``httpx.MockTransport`` or :class:`RecordingTransport`;
no test touches the network.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Union

import httpx
import pytest

from CrptKit.DocumentSubmit.documents import Description, IntroduceGoodsDocument, Product
from CrptKit.DocumentSubmit.logging_utils import LOGGER_NAME
from CrptKit.DocumentSubmit.ratelimit.limiter import RateLimiter
from CrptKit.DocumentSubmit.settings import reset_settings

BASE_URL = "https://registry.test/api/v3"
TOKEN = "token-123"
SIGNATURE = "c2lnbmF0dXJl"


class RecordingTransport:
    """Transport double that records requests and replays a canned response."""

    def __init__(
        self,
        response: Union[httpx.Response, Callable[[httpx.Request], httpx.Response], None] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.response = response if response is not None else httpx.Response(200, text="{}")
        self.error = error
        self.requests: List[httpx.Request] = []
        self.timeouts: List[float] = []
        self.closed = 0

    def send(self, request: httpx.Request, timeout: float) -> httpx.Response:
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        if callable(self.response):
            return self.response(request)
        return self.response

    def close(self) -> None:
        self.closed += 1


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep ambient CRPT_* variables out of the tests."""
    for name in (
        "CRPT_BASE_URL",
        "CRPT_WINDOW_UNIT",
        "CRPT_MAX_REQUESTS_PER_WINDOW",
        "CRPT_REQUEST_TIMEOUT_S",
        "CRPT_TOKEN",
        "CRPT_LOG_DIR",
        "CRPT_LOG_LEVEL",
        "CRPT_QUOTA",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def sample_document() -> IntroduceGoodsDocument:
    return IntroduceGoodsDocument(
        description=Description(participant_inn="7700000000"),
        doc_id="doc-1",
        doc_type="LP_INTRODUCE_GOODS",
        import_request=False,
        owner_inn="7700000000",
        participant_inn="7700000000",
        producer_inn="7700000000",
        production_date="2024-01-15",
        production_type="OWN_PRODUCTION",
        products=[
            Product(
                certificate_document="CONFORMITY_CERTIFICATE",
                owner_inn="7700000000",
                producer_inn="7700000000",
                production_date="2024-01-15",
                tnved_code="0401201100",
                uit_code="010460123456789021abcdef",
            )
        ],
        reg_date="2024-01-16",
        reg_number="42",
    )


@pytest.fixture
def limiter_factory():
    """Build limiters that are shut down after the test."""
    created: List[RateLimiter] = []

    def factory(capacity: int = 5, window: float = 60.0) -> RateLimiter:
        limiter = RateLimiter(capacity, window, name="test")
        created.append(limiter)
        return limiter

    yield factory
    for limiter in created:
        limiter.shutdown()


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo handlers and propagation changes made by ``setup_logging``."""
    logger = logging.getLogger(LOGGER_NAME)
    level, propagate = logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if getattr(handler, "_crpt_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
