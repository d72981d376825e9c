import logging

import pytest

pytestmark = pytest.mark.anyio("asyncio")

WEBHOOK_LOGGER = "asaas_bridge.services.webhook_service"


def _webhook_records(caplog):
    return [r for r in caplog.records if r.name == WEBHOOK_LOGGER]


async def test_webhook_acknowledges_and_logs_once(async_client, fake_asaas, caplog):
    caplog.set_level(logging.INFO)
    event = {"id": "evt_1", "event": "PAYMENT_CREATED", "payment": {"id": "pay_1"}}

    resp = await async_client.post("/webhook/asaas", json=event)

    assert resp.status_code == 200
    assert resp.content == b""
    [record] = _webhook_records(caplog)
    assert "PAYMENT_CREATED" in record.getMessage()
    assert "pay_1" in record.getMessage()
    assert record.webhook_event == "PAYMENT_CREATED"
    assert record.asaas_customer_id is None
    assert fake_asaas.calls == []


async def test_payment_confirmed_logs_customer(async_client, caplog):
    caplog.set_level(logging.INFO)
    event = {
        "event": "PAYMENT_CONFIRMED",
        "payment": {"id": "pay_2", "customer": "cus_42", "value": 49.9},
    }

    resp = await async_client.post("/webhook/asaas", json=event)

    assert resp.status_code == 200
    [record] = _webhook_records(caplog)
    assert record.webhook_event == "PAYMENT_CONFIRMED"
    assert record.asaas_customer_id == "cus_42"


@pytest.mark.parametrize("body", [[1, 2, 3], {"unexpected": True}, "just a string", 42])
async def test_any_json_body_is_acknowledged(async_client, caplog, body):
    caplog.set_level(logging.INFO)

    resp = await async_client.post("/webhook/asaas", json=body)

    assert resp.status_code == 200
    assert resp.content == b""
    assert len(_webhook_records(caplog)) == 1


async def test_invalid_json_is_rejected(async_client, caplog):
    caplog.set_level(logging.INFO)

    resp = await async_client.post(
        "/webhook/asaas",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}
    assert _webhook_records(caplog) == []


async def test_empty_json_body_is_acknowledged(async_client, caplog):
    caplog.set_level(logging.INFO)

    resp = await async_client.post(
        "/webhook/asaas",
        content=b"",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 200
    assert resp.content == b""
    [record] = _webhook_records(caplog)
    assert record.getMessage() == "Asaas webhook received: {}"


async def test_form_encoded_body_is_acknowledged_as_empty_event(async_client, caplog):
    caplog.set_level(logging.INFO)

    resp = await async_client.post("/webhook/asaas", data={"event": "PAYMENT_CONFIRMED"})

    assert resp.status_code == 200
    assert resp.content == b""
    [record] = _webhook_records(caplog)
    assert record.getMessage() == "Asaas webhook received: {}"
    assert record.asaas_customer_id is None


async def test_body_without_content_type_is_acknowledged(async_client, caplog):
    caplog.set_level(logging.INFO)

    resp = await async_client.post("/webhook/asaas", content=b'{"event": "PAYMENT_CREATED"}')

    assert resp.status_code == 200
    assert len(_webhook_records(caplog)) == 1
