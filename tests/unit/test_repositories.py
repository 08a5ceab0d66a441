from unittest.mock import MagicMock

import webshop.catalog.repository as products_repo
import webshop.checkout.repository as sessions_repo
import webshop.orders.repository as orders_repo
import webshop.users.repository as users_repo

class _Resp:
    def __init__(self, data=None):
        self.data = data

def _boom():
    raise Exception("boom")

def _client_returning(data):
    """Client Supabase dont toute chaîne table()...execute() renvoie data."""
    client = MagicMock()
    query = MagicMock()
    client.table.return_value = query
    for name in ("select", "eq", "in_", "order", "limit", "range", "upsert"):
        getattr(query, name).return_value = query
    query.execute.return_value = _Resp(data)
    client.rpc.return_value.execute.return_value = _Resp(data)
    return client, query

def test_get_products_map_single_query(monkeypatch):
    client, query = _client_returning([{"id": 1, "name": "A", "price": 1}, {"id": "2", "name": "B", "price": 2}])
    monkeypatch.setattr("webshop.infra.supabase_client.get_supabase", lambda: client)

    result = products_repo.get_products_map([1, 2, 1, 9])

    assert set(result) == {1, 2}
    query.in_.assert_called_once_with("id", [1, 2, 9])

def test_products_errors_return_neutral_values(monkeypatch):
    monkeypatch.setattr("webshop.infra.supabase_client.get_supabase", _boom)
    assert products_repo.list_products() == []
    assert products_repo.get_product(1) is None
    assert products_repo.get_products_map([1]) == {}
    assert products_repo.get_products_map([]) == {}

def test_get_user_by_email(monkeypatch):
    client, query = _client_returning([{"id": "u1", "email": "a@x.com", "role": "user"}])
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)

    assert users_repo.get_user_by_email("a@x.com")["id"] == "u1"
    query.eq.assert_called_with("email", "a@x.com")
    assert users_repo.get_user_by_email("") is None

def test_get_user_by_id_missing(monkeypatch):
    client, _ = _client_returning([])
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)
    assert users_repo.get_user_by_id("u404") is None

def test_create_order_with_lines_calls_rpc(monkeypatch):
    client, _ = _client_returning({"id": 7, "status": "Paid", "created": True})
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)

    order = orders_repo.create_order_with_lines(
        user_id="u1", status="Paid", order_date="2026-01-01T00:00:00+00:00",
        lines=[{"product_id": 1, "quantity": 2, "price": 9.5}], checkout_session_id="cs_1",
    )

    assert order["id"] == 7
    name, params = client.rpc.call_args.args
    assert name == "create_order_with_lines"
    assert params["p_checkout_session_id"] == "cs_1"
    assert params["p_lines"] == [{"product_id": 1, "quantity": 2, "price": 9.5}]

def test_create_order_with_lines_list_result(monkeypatch):
    client, _ = _client_returning([{"id": 8}])
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)
    assert orders_repo.create_order_with_lines(user_id="u1", status="Paid", order_date="d", lines=[{}])["id"] == 8

def test_create_order_with_lines_failure_returns_none(monkeypatch):
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", _boom)
    assert orders_repo.create_order_with_lines(user_id="u1", status="Paid", order_date="d", lines=[]) is None

def test_order_reads(monkeypatch):
    client, query = _client_returning([{"id": 3, "user_id": "u1", "users": {"id": "u1", "email": "a@x.com"}}])
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)

    assert orders_repo.find_order_by_id(3)["users"]["email"] == "a@x.com"
    assert len(orders_repo.find_all_orders()) == 1
    assert len(orders_repo.find_orders_by_user("u1")) == 1
    assert orders_repo.find_orders_by_user("") == []

def test_order_reads_errors(monkeypatch):
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", _boom)
    assert orders_repo.find_all_orders() == []
    assert orders_repo.find_order_by_id(1) is None
    assert orders_repo.find_lines_by_order(1) == []

def test_save_and_get_pending_checkout(monkeypatch):
    client, query = _client_returning([])
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)

    row = sessions_repo.save_pending_checkout(
        session_id="cs_1", user_email="a@x.com", cart=[{"product_id": "2", "quantity": 3}],
    )
    assert row["status"] == "pending"
    assert query.upsert.call_args.args[0]["cart"] == [{"product_id": 2, "quantity": 3}]
    assert sessions_repo.get_pending_checkout("cs_1") is None
    assert sessions_repo.get_pending_checkout("") is None

def test_save_pending_checkout_failure(monkeypatch):
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", _boom)
    assert sessions_repo.save_pending_checkout(session_id="cs_1", user_email="a@x.com", cart=[]) is None

def test_find_all_orders_requests_one_page(monkeypatch):
    client, query = _client_returning([])
    monkeypatch.setattr("webshop.infra.supabase_client.get_service_supabase", lambda: client)

    orders_repo.find_all_orders(limit=50, offset=100)

    query.order.assert_called_once_with("order_date", desc=True)
    query.range.assert_called_once_with(100, 149)
