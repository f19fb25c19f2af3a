import json

import pytest
from fastapi.testclient import TestClient

from paymee_gateway.main import app, get_gateway
from paymee_gateway.orders import TRANSACTION_TOKEN_META_KEY

from .test_gateway import make_gateway

IPN_URL = "/?wc-api=paymee_ipn_listener"


@pytest.fixture
def api(config, store):
    def use(gateway):
        app.dependency_overrides[get_gateway] = lambda: gateway
        return TestClient(app)

    yield use
    app.dependency_overrides.clear()


def test_health(api, config, store):
    assert api(make_gateway(config, store)).get("/health").json() == {"ok": True}


def test_get_order(api, config, store):
    client = api(make_gateway(config, store))

    assert client.get("/orders/42").json()["billing_email"] == "maria@example.com"
    assert client.get("/orders/1").status_code == 404


def test_checkout_redirects_on_success(api, config, store):
    r = api(make_gateway(config, store)).post("/checkout/42")

    assert r.status_code == 200
    assert r.json() == {
        "result": "success",
        "redirect": "https://www2.paymee.com.br/redir/tok-1",
        "errors": [],
    }
    assert store.meta[42][TRANSACTION_TOKEN_META_KEY] == "tok-1"


def test_checkout_failure_is_402(api, config, store):
    r = api(make_gateway(config, store, 200, {"error": [{"code": 999}]})).post("/checkout/42")

    assert r.status_code == 402
    assert r.json()["result"] == "fail"
    assert r.json()["errors"] == ["PayMee: A situação da transação não está pendente."]


def test_checkout_unavailable(api, config, store):
    client = api(make_gateway(config.model_copy(update={"api_token": ""}), store))
    assert client.post("/checkout/42").status_code == 409


def test_checkout_outside_brazil(api, config, store):
    assert api(make_gateway(config, store)).post("/checkout/42?country=AR").status_code == 409


def test_checkout_unknown_order(api, config, store):
    assert api(make_gateway(config, store)).post("/checkout/7").status_code == 404


def test_ipn_updates_order(api, config, store):
    body = {"referenceCode": "WC-42", "newStatus": "PAID", "paymentLink": "https://x"}
    r = api(make_gateway(config, store)).post(IPN_URL, content=json.dumps(body))

    assert r.status_code == 200
    assert r.json() == {"ok": True, "order_id": 42, "status": "processing"}
    assert store.statuses[42] == "processing"


@pytest.mark.parametrize("content", [b"", b"not json", b'{"newStatus": "PAID"}'])
def test_ipn_rejects_malformed_notifications(api, config, store, content):
    r = api(make_gateway(config, store)).post(IPN_URL, content=content)

    assert r.status_code == 400
    assert r.json()["detail"] == "PayMee Request Failure"


def test_ipn_get_without_body(api, config, store):
    assert api(make_gateway(config, store)).get(IPN_URL).status_code == 400


def test_ipn_foreign_reference(api, config, store):
    body = {"referenceCode": "OTHER-42", "newStatus": "PAID"}
    assert api(make_gateway(config, store)).post(IPN_URL, content=json.dumps(body)).status_code == 400


def test_ipn_unknown_order(api, config, store):
    body = {"referenceCode": "WC-9000", "newStatus": "PAID"}
    assert api(make_gateway(config, store)).post(IPN_URL, content=json.dumps(body)).status_code == 404


def test_root_without_listener_is_404(api, config, store):
    assert api(make_gateway(config, store)).get("/").status_code == 404


def test_admin_notices(api, config, store):
    client = api(make_gateway(config.model_copy(update={"api_key": ""}), store))
    assert client.get("/admin/notices").json() == {
        "notices": ["PayMee Disabled: você precisa informar sua x-api-key."]
    }


def test_gateway_info(api, config, store):
    info = api(make_gateway(config, store)).get("/gateway").json()
    assert info["title"] == "PayMee"
    assert info["available"] is True
