import json

import pytest

from webshop.checkout.service import ReconciliationOutcome
from webshop.errors import (
    BadRequest,
    ExternalServiceError,
    Forbidden,
    InvalidPayload,
    InvalidSignature,
    StorageError,
    Unauthorized,
)
from fakes import ALICE, BOB, completed_event, sign_payload

def _checkout(checkout_service, gateway, cart, user="a@x.com", pay=True):
    session_id = checkout_service.create_checkout_session(cart, user)["id"]
    if pay:
        gateway.pay(session_id)
    return session_id

def _deliver(reconciler, session_id, event_type="checkout.session.completed"):
    payload = completed_event(session_id, event_type)
    return reconciler.handle_event(payload, sign_payload(payload))

def test_completed_event_creates_one_order_with_all_lines(checkout_service, reconciler, gateway, store, products):
    cart = [{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 1}, {"product_id": 3, "quantity": 4}]
    session_id = _checkout(checkout_service, gateway, cart)
    # Le prix figé est celui du moment de la réconciliation
    products.set_price(2, 95.0)

    result = _deliver(reconciler, session_id)

    assert result.outcome == ReconciliationOutcome.APPLIED
    assert result.lines == 3
    assert len(store.orders) == 1
    order = store.orders[result.order_id]
    assert order["status"] == "Paid"
    assert order["user_id"] == ALICE["id"]
    assert order["checkout_session_id"] == session_id
    assert sorted((l["product_id"], l["quantity"], l["price"]) for l in store.lines.values()) == [
        (1, 2, 199.0), (2, 1, 95.0), (3, 4, 12.25),
    ]
    assert store.sessions[session_id]["status"] == "completed"

def test_unknown_user_is_acknowledged_without_writes(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}], user="ghost@x.com")

    result = _deliver(reconciler, session_id)

    assert result.outcome == ReconciliationOutcome.SKIPPED_UNKNOWN_USER
    assert store.orders == {} and store.lines == {}

def test_no_resolvable_lines_is_acknowledged(reconciler, gateway, store):
    gateway.add_session("cs_meta", {"user_id": "a@x.com", "product_1": "404,1"})

    result = _deliver(reconciler, "cs_meta")

    assert result.outcome == ReconciliationOutcome.SKIPPED_NO_LINES
    assert store.orders == {}

def test_other_event_types_are_ignored(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}])

    result = _deliver(reconciler, session_id, event_type="checkout.session.expired")

    assert result.outcome == ReconciliationOutcome.IGNORED
    assert store.orders == {}

def test_unpaid_session_is_skipped(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}], pay=False)

    result = _deliver(reconciler, session_id)

    assert result.outcome == ReconciliationOutcome.SKIPPED_UNPAID
    assert store.orders == {}

def test_tampered_payload_rejected_and_store_untouched(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}])
    payload = completed_event(session_id)
    signature = sign_payload(payload)
    tampered = payload.replace(session_id.encode(), b"cs_test_other")

    with pytest.raises(InvalidSignature) as exc:
        reconciler.handle_event(tampered, signature)
    assert exc.value.status_code == 400
    with pytest.raises(InvalidSignature):
        reconciler.handle_event(payload, None)
    assert store.orders == {}

def test_invalid_json_with_valid_signature(reconciler):
    payload = b"not json"
    with pytest.raises(InvalidPayload):
        reconciler.handle_event(payload, sign_payload(payload))

@pytest.mark.parametrize("payload", [b"[]", b"null", b"42", b'"x"'])
def test_signed_json_that_is_not_an_object(reconciler, store, payload):
    with pytest.raises(InvalidPayload):
        reconciler.handle_event(payload, sign_payload(payload))
    assert store.orders == {}

def test_non_utf8_body_rejected(reconciler):
    with pytest.raises(InvalidPayload):
        reconciler.handle_event(b"\xff\xfe", "t=1,v1=abc")

def test_event_without_session_id(reconciler):
    payload = json.dumps({"type": "checkout.session.completed", "data": {"object": {}}}).encode()
    with pytest.raises(InvalidPayload):
        reconciler.handle_event(payload, sign_payload(payload))

def test_session_unknown_to_stripe(reconciler, store):
    with pytest.raises(BadRequest):
        _deliver(reconciler, "cs_missing")
    assert store.orders == {}

def test_gateway_failure_on_retrieve(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}])
    gateway.fail = True
    with pytest.raises(ExternalServiceError):
        _deliver(reconciler, session_id)
    assert store.orders == {}

def test_storage_failure_leaves_session_pending(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}])
    store.fail_writes = True

    with pytest.raises(StorageError):
        _deliver(reconciler, session_id)
    assert store.orders == {} and store.lines == {}
    assert store.sessions[session_id]["status"] == "pending"

    # Nouvelle livraison de Stripe après rétablissement
    store.fail_writes = False
    assert _deliver(reconciler, session_id).outcome == ReconciliationOutcome.APPLIED

def test_duplicate_delivery_creates_no_second_order(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}])

    first = _deliver(reconciler, session_id)
    second = _deliver(reconciler, session_id)

    assert first.outcome == ReconciliationOutcome.APPLIED
    assert second.outcome == ReconciliationOutcome.ALREADY_APPLIED
    assert second.order_id == first.order_id
    assert len(store.orders) == 1
    assert len(store.lines) == 1

def test_duplicate_delivery_without_registry_context(reconciler, gateway, store):
    gateway.add_session("cs_meta", {"user_id": "a@x.com", "product_1": "1,1"})

    _deliver(reconciler, "cs_meta")
    second = _deliver(reconciler, "cs_meta")

    assert second.outcome == ReconciliationOutcome.ALREADY_APPLIED
    assert len(store.orders) == 1

def test_interleaved_checkouts_use_their_own_context(checkout_service, reconciler, gateway, store):
    alice_session = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}], user="a@x.com")
    bob_session = _checkout(checkout_service, gateway, [{"product_id": 2, "quantity": 5}], user="b@x.com")

    bob_result = _deliver(reconciler, bob_session)
    alice_result = _deliver(reconciler, alice_session)

    bob_order = store.orders[bob_result.order_id]
    alice_order = store.orders[alice_result.order_id]
    assert bob_order["user_id"] == BOB["id"]
    assert alice_order["user_id"] == ALICE["id"]
    assert [(l["product_id"], l["quantity"]) for l in store._order_lines(bob_order["id"])] == [(2, 5)]
    assert [(l["product_id"], l["quantity"]) for l in store._order_lines(alice_order["id"])] == [(1, 1)]

def test_metadata_fallback_when_no_registry_entry(reconciler, gateway, store):
    gateway.add_session("cs_meta", {"user_id": "b@x.com", "product_1": "3,2", "product_2": "bad"})

    result = _deliver(reconciler, "cs_meta")

    assert result.outcome == ReconciliationOutcome.APPLIED
    assert result.lines == 1
    assert store.orders[result.order_id]["user_id"] == BOB["id"]

def test_result_to_dict(checkout_service, reconciler, gateway):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}])
    data = _deliver(reconciler, session_id).to_dict()
    assert data["status"] == "applied"
    assert data["lines"] == 1
    assert data["order_id"] == 1
    assert data["session_id"] == session_id

def test_confirm_requires_owner(checkout_service, reconciler, gateway, store):
    session_id = _checkout(checkout_service, gateway, [{"product_id": 1, "quantity": 1}], user="a@x.com")

    with pytest.raises(Unauthorized):
        reconciler.confirm_checkout_session(session_id, None)
    with pytest.raises(Forbidden):
        reconciler.confirm_checkout_session(session_id, BOB)
    assert store.orders == {}

    result = reconciler.confirm_checkout_session(session_id, ALICE)
    assert result.outcome == ReconciliationOutcome.APPLIED
    # Le webhook qui arrive ensuite ne recrée rien
    assert _deliver(reconciler, session_id).outcome == ReconciliationOutcome.ALREADY_APPLIED
