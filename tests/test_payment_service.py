# tests/test_payment_service.py
import pytest

from remen_abs.services.payment_service import (
    PAYMENT_METHODS,
    PaymentRequest,
    PaymentServiceManager,
    PaymentVerification,
    SimulatedGateway,
    build_payment_manager,
    get_provider_for_method,
    validate_payment_amount,
)


def request(key="order-1", amount=10000) -> PaymentRequest:
    return PaymentRequest(
        idempotency_key=key,
        order_number="20240305-001",
        amount=amount,
        method="card",
        customer_name="Kim",
        customer_email="buyer@example.com",
        customer_phone="010",
    )


def test_request_is_idempotent_per_key():
    gateway = SimulatedGateway("toss")

    first = gateway.request_payment(request())
    second = gateway.request_payment(request())
    other = gateway.request_payment(request(key="order-2"))

    assert first.success
    assert first.transaction_id.startswith("toss_")
    assert second.transaction_id == first.transaction_id
    assert other.transaction_id != first.transaction_id


def test_verify_checks_amount_server_side():
    gateway = SimulatedGateway("toss")
    tx = gateway.request_payment(request(amount=10000)).transaction_id

    def verify(amount, transaction_id=tx):
        return gateway.verify_payment(
            PaymentVerification(
                order_id="order-1",
                transaction_id=transaction_id,
                amount=amount,
                method="card",
                provider="toss",
            )
        )

    assert verify(10000)
    assert not verify(9000)
    assert not verify(10000, transaction_id="toss_unknown")


def test_refund_and_cancel():
    gateway = SimulatedGateway("toss")
    tx = gateway.request_payment(request(amount=10000)).transaction_id

    assert not gateway.refund_payment(tx, 20000)
    assert gateway.refund_payment(tx, 4000)
    assert gateway.cancel_payment(tx)
    assert not gateway.cancel_payment(tx)


def test_manager_dispatch():
    manager = build_payment_manager("toss")

    assert sorted(manager.registered_providers()) == ["iamport", "toss"]
    assert manager.gateway().provider == "toss"
    assert manager.gateway("iamport").name == "Iamport"

    with pytest.raises(ValueError):
        manager.set_provider("paypal")
    with pytest.raises(ValueError):
        PaymentServiceManager().gateway()


def test_every_method_clears_through_toss():
    assert {get_provider_for_method(m) for m in PAYMENT_METHODS} == {"toss"}


def test_validate_payment_amount():
    assert validate_payment_amount(10000, 10000.5)
    assert not validate_payment_amount(10000, 10001)
