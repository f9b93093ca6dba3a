"""Payment gateway adapters.

``PaymentGateway`` is the contract the order flow depends on. ``YooKassaGateway``
talks to the real provider over HTTPS; ``FakeGateway`` answers locally for
development and tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from uuid import uuid4

import httpx
from fastapi import Depends

from app.core_settings import Settings, get_settings
from app.domain.errors import ConfigurationError, UpstreamFailure
from shared.core import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentRequest:
    order_id: str
    amount: int
    currency: str
    description: str
    return_url: Optional[str]
    receipt: dict


@dataclass(frozen=True)
class PaymentLink:
    """What the provider answered to a create-payment call."""

    payment_id: Optional[str]
    status: Optional[str]
    confirmation_url: Optional[str]


def format_amount(value: int) -> str:
    """12990 -> "12990.00", the provider's amount string."""
    return f"{value:.2f}"


class PaymentGateway(ABC):

    @abstractmethod
    def create_payment(self, request: PaymentRequest) -> PaymentLink:
        """Create a redirect payment tagged with the order id."""
        ...


class YooKassaGateway(PaymentGateway):
    """YooKassa REST API v3 client (``POST /payments``)."""

    def __init__(
        self,
        shop_id: Optional[str],
        secret_key: Optional[str],
        api_url: str = "https://api.yookassa.ru/v3",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not shop_id or not secret_key:
            raise ConfigurationError("Payment provider credentials are not configured")
        self.shop_id = shop_id
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _payload(self, request: PaymentRequest) -> dict[str, Any]:
        return {
            "amount": {"value": format_amount(request.amount), "currency": request.currency},
            "capture": True,
            "confirmation": {"type": "redirect", "return_url": request.return_url},
            "description": request.description,
            "metadata": {"orderId": request.order_id},
            "receipt": request.receipt,
        }

    def create_payment(self, request: PaymentRequest) -> PaymentLink:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    f"{self.api_url}/payments",
                    json=self._payload(request),
                    auth=(self.shop_id, self.secret_key),
                    # Same order -> same payment if the call is retried
                    headers={"Idempotence-Key": request.order_id},
                )
        except httpx.HTTPError as e:
            logger.error(f"YooKassa request failed for {request.order_id}: {e}")
            raise UpstreamFailure("Payment provider is unavailable") from e

        if response.status_code >= 400:
            logger.error(
                f"YooKassa rejected payment for {request.order_id}",
                extra={'extra_fields': {'status_code': response.status_code, 'body': response.text[:500]}},
            )
            raise UpstreamFailure("Payment provider rejected the payment")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"YooKassa sent a non-JSON reply for {request.order_id}")
            raise UpstreamFailure("Payment provider sent an unreadable reply") from e
        if not isinstance(data, dict):
            logger.error(f"YooKassa sent an unexpected reply for {request.order_id}")
            raise UpstreamFailure("Payment provider sent an unreadable reply")

        confirmation = data.get("confirmation")
        return PaymentLink(
            payment_id=data.get("id"),
            status=data.get("status"),
            confirmation_url=confirmation.get("confirmation_url") if isinstance(confirmation, dict) else None,
        )


class FakeGateway(PaymentGateway):
    """Local gateway; every call is recorded in ``calls``."""

    def __init__(self, confirmation_base: str = "https://pay.example.test/checkout"):
        self.confirmation_base = confirmation_base
        self.return_link = True
        self.fail_with: Optional[Exception] = None
        self.calls: list[PaymentRequest] = []

    def create_payment(self, request: PaymentRequest) -> PaymentLink:
        self.calls.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        payment_id = f"fake_{uuid4().hex[:12]}"
        return PaymentLink(
            payment_id=payment_id,
            status="pending",
            confirmation_url=f"{self.confirmation_base}/{payment_id}" if self.return_link else None,
        )


_fake_gateway = FakeGateway()


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> PaymentGateway:
    if settings.PAYMENT_PROVIDER == "fake":
        return _fake_gateway
    return YooKassaGateway(
        shop_id=settings.YOOKASSA_SHOP_ID,
        secret_key=settings.YOOKASSA_SECRET_KEY,
        api_url=settings.YOOKASSA_API_URL,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
    )
