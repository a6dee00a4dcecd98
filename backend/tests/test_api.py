import requests

from nvago.services import notify


def create_order(client, form):
    resp = client.post("/orders/", json=form)
    assert resp.status_code == 201, resp.text
    return resp.json()["order"]


def test_root(client):
    assert client.get("/").json() == {"status": "ok", "service": "nvago"}


def test_quote(client, order_form):
    resp = client.post("/quote/", json=order_form)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 11520
    assert body["is_form_valid"] is True
    assert body["dim_error"] is None


def test_quote_undersized(client, order_form):
    body = client.post("/quote/", json={**order_form, "height": "1", "width": "5"}).json()
    assert body["total"] == 0
    assert body["dim_error"] == "Minimum size is 2 × 3 inches (either 2×3 or 3×2)."


def test_validate(client, order_form):
    body = client.post("/validate/", json={**order_form, "first_name": " ", "quantity": "0"}).json()
    assert body == {"is_form_valid": False, "issues": ["invalid_quantity", "missing_first_name"]}


def test_submit_invalid_order_is_not_stored(client, order_form):
    resp = client.post("/orders/", json={**order_form, "attached_file": None})
    assert resp.status_code == 422
    assert resp.json()["detail"] == {"issues": ["missing_attached_file"]}
    assert client.get("/dashboard/stats").json()["by_status"]["Validation"] == 0


def test_submit_order(client, order_form):
    order = create_order(client, {**order_form, "quantity": "5", "has_file": False, "attached_file": None})
    assert order["status"] == "Validation"
    assert order["total"] == 6150
    assert order["quantity"] == 5
    assert order["height"] == 3 and order["width"] == 4
    assert order["variant"] == "Glossy"

    fetched = client.get(f"/orders/{order['id']}").json()
    assert fetched["id"] == order["id"]
    assert fetched["next_status"] == "Layout Approval"


def test_missing_order(client):
    assert client.get("/orders/999").status_code == 404
    assert client.post("/orders/999/status", json={"status": "Printing"}).status_code == 404


def test_skipping_a_step_is_refused_without_writes(client, order_form, sent):
    order = create_order(client, order_form)
    resp = client.post(f"/orders/{order['id']}/status", json={"status": "Printing"})

    assert resp.status_code == 409
    assert resp.json()["detail"] == "Order must be in 'Layout Approval' status first"
    assert client.get(f"/orders/{order['id']}").json()["status"] == "Validation"
    assert client.get(f"/orders/{order['id']}/history").json() == []
    assert sent == []


def test_full_order_lifecycle(client, order_form, sent):
    order = create_order(client, order_form)
    oid = order["id"]

    paid = client.post(f"/orders/{oid}/payment", json={"payment_proof": "gcash-ref-123"})
    assert paid.status_code == 200
    assert paid.json()["status"] == "Layout Approval"
    assert paid.json()["payment_proof"] == "gcash-ref-123"

    printing = client.post(f"/orders/{oid}/status", json={"status": "Printing"}).json()
    assert printing["changed"] is True
    assert printing["notifications"] == []

    pickup = client.post(f"/orders/{oid}/status", json={"status": "For Pickup"}).json()
    assert pickup["notifications"] == [{"kind": "ready_for_pickup", "delivered": True}]

    finished = client.post(f"/orders/{oid}/status", json={"status": "Finished", "note": "picked up"}).json()
    assert finished["order"]["status"] == "Finished"
    assert finished["order"]["chat_archived"] is True
    assert [c["json"]["kind"] for c in sent] == ["ready_for_pickup", "completed"]
    assert sent[1]["json"]["archive_conversation"] is True
    assert sent[1]["json"]["email"] == "kriz@example.com"

    again = client.post(f"/orders/{oid}/status", json={"status": "Finished"}).json()
    assert again["changed"] is False
    assert len(sent) == 2

    history = client.get(f"/orders/{oid}/history").json()
    assert [(h["old_status"], h["new_status"]) for h in history] == [
        ("Validation", "Layout Approval"),
        ("Layout Approval", "Printing"),
        ("Printing", "For Pickup"),
        ("For Pickup", "Finished"),
    ]
    assert history[-1]["note"] == "picked up"


def test_payment_records_one_sale(client, order_form):
    order = create_order(client, order_form)
    client.post(f"/orders/{order['id']}/payment", json={"payment_proof": "walk_in_payment"})
    client.post(f"/orders/{order['id']}/payment", json={"payment_proof": "walk_in_payment"})

    report = client.get("/dashboard/sales").json()
    assert report["totals"]["transactions"] == 1
    assert report["totals"]["grand_total"] == 11520
    assert report["rows"][0]["unit_price"] == 960
    assert client.get("/dashboard/sales", params={"date": "2001-01-01"}).json()["totals"]["transactions"] == 0


def test_send_for_approval(client, order_form, sent):
    order = create_order(client, order_form)
    oid = order["id"]

    first = client.post(f"/orders/{oid}/approval", json={"layout_file": "layout-v1.png"}).json()
    assert first["changed"] is True
    assert first["order"]["status"] == "Layout Approval"
    assert first["order"]["layout_file"] == "layout-v1.png"

    resend = client.post(f"/orders/{oid}/approval", json={"layout_file": "layout-v2.png"}).json()
    assert resend["changed"] is False
    assert resend["order"]["layout_file"] == "layout-v2.png"

    assert [c["json"]["layout_file"] for c in sent] == ["layout-v1.png", "layout-v2.png"]
    keys = [c["headers"]["Idempotency-Key"] for c in sent]
    assert keys[0] != keys[1]
    assert all(c["json"]["kind"] == "approval_request" for c in sent)


def test_denied_order_is_terminal(client, order_form, sent):
    order = create_order(client, order_form)
    oid = order["id"]

    denied = client.post(f"/orders/{oid}/status", json={"status": "Denied"})
    assert denied.status_code == 200
    assert sent[0]["json"]["kind"] == "denied"

    resp = client.post(f"/orders/{oid}/status", json={"status": "Layout Approval"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Order has been denied"
    assert client.post(f"/orders/{oid}/payment", json={}).status_code == 409


def test_failed_notification_keeps_transition(client, order_form, monkeypatch):
    def failing_post(*args, **kwargs):
        raise requests.ConnectionError("sink down")

    monkeypatch.setattr(notify.requests, "post", failing_post)
    order = create_order(client, order_form)

    body = client.post(f"/orders/{order['id']}/status", json={"status": "Denied"}).json()
    assert body["notifications"] == [{"kind": "denied", "delivered": False}]
    assert client.get(f"/orders/{order['id']}").json()["status"] == "Denied"


def test_dashboard(client, order_form, sent):
    first = create_order(client, order_form)
    create_order(client, {**order_form, "quantity": "5", "has_file": False, "attached_file": None})
    client.post(f"/orders/{first['id']}/status", json={"status": "Denied"})

    summary = client.get("/dashboard/summary").json()
    # nothing has been paid yet
    assert summary == {"total_orders": 2, "revenue": 0, "pending_validation": 1}

    by_status = client.get("/dashboard/stats").json()["by_status"]
    assert by_status["Denied"] == 1
    assert by_status["Validation"] == 1

    html = client.get("/dashboard/summary", headers={"accept": "text/html"})
    assert "Dashboard Summary" in html.text


def test_dashboard_revenue_counts_paid_orders(client, order_form, sent):
    paid = create_order(client, order_form)
    create_order(client, {**order_form, "quantity": "5", "has_file": False, "attached_file": None})
    client.post(f"/orders/{paid['id']}/payment", json={"payment_proof": "gcash-ref-9"})

    assert client.get("/dashboard/summary").json()["revenue"] == 11520


def test_dtf_product_name_enforces_minimum_quantity(client, order_form):
    form = {**order_form, "product_name": "DTF PRINT PER 22x39 INCHES", "product_category": "DTF", "quantity": "5"}

    body = client.post("/validate/", json=form).json()
    assert body == {"is_form_valid": False, "issues": ["quantity_below_minimum"]}

    resp = client.post("/orders/", json=form)
    assert resp.status_code == 422
    assert resp.json()["detail"] == {"issues": ["quantity_below_minimum"]}

    quote = client.post("/quote/", json=form).json()
    assert quote["dtf_warning"] == "Minimum quantity for DTF Print is 10."

    assert client.post("/orders/", json={**form, "quantity": "10"}).status_code == 201


def test_next_status_for_finished_order(client, order_form, sent):
    oid = create_order(client, order_form)["id"]
    client.post(f"/orders/{oid}/payment", json={"payment_proof": "walk_in_payment"})
    for status in ("Printing", "For Pickup", "Finished"):
        client.post(f"/orders/{oid}/status", json={"status": status})
    assert client.get(f"/orders/{oid}").json()["next_status"] is None
