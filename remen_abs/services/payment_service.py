# remen_abs/services/payment_service.py
"""
Payment gateway (PG) capability.

Every provider implements the same five calls. No provider here talks to
a real PG: `SimulatedGateway` fabricates transaction ids, logs the call,
and answers success. Requests carry an idempotency key (the order id), so
asking twice for the same order returns the same transaction.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("card", "bank_transfer", "kakao_pay", "naver_pay", "toss_pay")


@dataclass
class PaymentRequest:
    idempotency_key: str
    order_number: str
    amount: int
    method: str
    customer_name: str
    customer_email: str
    customer_phone: str
    items: list[dict] = field(default_factory=list)


@dataclass
class PaymentResponse:
    success: bool
    transaction_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None


@dataclass
class PaymentVerification:
    order_id: str
    transaction_id: str
    amount: int
    method: str
    provider: str


class PaymentGateway(Protocol):
    name: str
    provider: str

    def initialize(self, config: dict) -> None: ...

    def request_payment(self, request: PaymentRequest) -> PaymentResponse: ...

    def verify_payment(self, verification: PaymentVerification) -> bool: ...

    def cancel_payment(self, transaction_id: str, reason: str | None = None) -> bool: ...

    def refund_payment(
        self, transaction_id: str, amount: int, reason: str | None = None
    ) -> bool: ...


class SimulatedGateway:
    """
    In-process stand-in for a PG provider.

    Keeps the transactions it issued so verification can check the amount
    instead of trusting whatever the client reports.
    """

    def __init__(self, provider: str, name: str | None = None):
        self.provider = provider
        self.name = name or provider
        self.config: dict = {}
        self._by_key: dict[str, str] = {}
        self._amounts: dict[str, int] = {}

    def initialize(self, config: dict) -> None:
        self.config = dict(config)
        logger.info("%s gateway initialized (simulated)", self.name)

    def request_payment(self, request: PaymentRequest) -> PaymentResponse:
        if request.amount < 0:
            return PaymentResponse(
                success=False,
                error_code="INVALID_AMOUNT",
                error_message="Payment amount must not be negative",
            )

        existing = self._by_key.get(request.idempotency_key)
        if existing is not None:
            return PaymentResponse(success=True, transaction_id=existing)

        transaction_id = f"{self.provider}_{uuid.uuid4().hex[:16]}"
        self._by_key[request.idempotency_key] = transaction_id
        self._amounts[transaction_id] = request.amount
        logger.info(
            "%s payment request order=%s amount=%d -> %s",
            self.name,
            request.order_number,
            request.amount,
            transaction_id,
        )
        return PaymentResponse(success=True, transaction_id=transaction_id)

    def verify_payment(self, verification: PaymentVerification) -> bool:
        charged = self._amounts.get(verification.transaction_id)
        if charged is None:
            return False
        return validate_payment_amount(charged, verification.amount)

    def cancel_payment(self, transaction_id: str, reason: str | None = None) -> bool:
        logger.info("%s cancel %s (%s)", self.name, transaction_id, reason)
        return self._amounts.pop(transaction_id, None) is not None

    def refund_payment(
        self, transaction_id: str, amount: int, reason: str | None = None
    ) -> bool:
        charged = self._amounts.get(transaction_id)
        if charged is None or amount > charged:
            return False
        logger.info("%s refund %s amount=%d (%s)", self.name, transaction_id, amount, reason)
        self._amounts[transaction_id] = charged - amount
        return True


class PaymentServiceManager:
    """
    Registry of gateways plus the currently selected provider.
    """

    def __init__(self, default_provider: str = "toss"):
        self._services: dict[str, PaymentGateway] = {}
        self.current_provider = default_provider

    def register(self, gateway: PaymentGateway) -> None:
        self._services[gateway.provider] = gateway

    def set_provider(self, provider: str) -> None:
        if provider not in self._services:
            raise ValueError(f"PG provider {provider} is not registered")
        self.current_provider = provider

    def gateway(self, provider: str | None = None) -> PaymentGateway:
        key = provider or self.current_provider
        service = self._services.get(key)
        if service is None:
            raise ValueError(f"PG provider {key} is not initialized")
        return service

    def registered_providers(self) -> list[str]:
        return list(self._services)


def get_provider_for_method(method: str) -> str:
    """
    Wallets (kakao/naver/toss pay) and cards all clear through Toss.
    """
    return "toss"


def validate_payment_amount(expected: int | float, actual: int | float) -> bool:
    return abs(expected - actual) < 1


def build_payment_manager(default_provider: str = "toss") -> PaymentServiceManager:
    manager = PaymentServiceManager(default_provider)
    for provider, name in (("toss", "TossPayments"), ("iamport", "Iamport")):
        gateway = SimulatedGateway(provider, name)
        gateway.initialize({})
        manager.register(gateway)
    manager.set_provider(default_provider)
    return manager
