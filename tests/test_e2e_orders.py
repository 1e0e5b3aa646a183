from __future__ import annotations

from datetime import datetime, timedelta, timezone

from horder.domain.accounting.reports import TimeWindow, compute_stats
from horder.domain.customers import NewCustomer
from horder.domain.inventory.commands import ProductInput, VariantInput, create_product
from horder.domain.orders.commands import CartLine, CustomerRef, create_order
from horder.domain.orders.refunds import cancel_order, compute_recommended_refund

T0 = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


def test_sell_then_cancel_after_period_elapsed(repo):
    product = create_product(
        repo,
        ProductInput(name="A", variants=[VariantInput(duration="1 tháng", import_price=25000, sell_price=40000)]),
        now=T0,
    )
    order = create_order(
        repo,
        CustomerRef(new_customer=NewCustomer(name="Lan", phone="0901000001")),
        [CartLine(product_id=product.id, variant_id=product.variants[0].id)],
        now=T0,
    )
    assert order.total_amount == 40000
    assert order.items[0].cost_at_sale == 25000

    later = T0 + timedelta(days=31)
    recommended = compute_recommended_refund(order, now=later)
    assert recommended == 0

    cancel_order(repo, order.id, refund_to_customer=recommended, now=later)

    stats = compute_stats(repo.list_orders(), TimeWindow(kind="all"), now=later, tz=timezone.utc)
    assert stats.order_count == 1
    assert stats.revenue == 40000
    assert stats.profit == 15000


def _create_product(client, headers) -> tuple[str, str]:
    body = client.post(
        "/products",
        json={"name": "A", "variants": [{"duration": "1 tháng", "import_price": 25000, "sell_price": 40000}]},
        headers=headers,
    ).json()
    return body["id"], body["variants"][0]["id"]


def _place(client, headers, product_id, variant_id, order_date=None, phone="0901000001", **line):
    payload = {
        "customer": {"new_customer": {"name": "Lan", "phone": phone}},
        "items": [{"product_id": product_id, "variant_id": variant_id, **line}],
        "notes": "qua Zalo",
    }
    if order_date is not None:
        payload["order_date"] = order_date.isoformat()
    return client.post("/orders", json=payload, headers=headers)


def test_order_lifecycle_over_http(client, auth_headers):
    product_id, variant_id = _create_product(client, auth_headers)
    placed_at = datetime.now(timezone.utc) - timedelta(days=31)

    created = _place(client, auth_headers, product_id, variant_id, order_date=placed_at)
    assert created.status_code == 201
    order = created.json()
    assert order["total_amount"] == 40000
    assert order["items"][0]["product_name"] == "A (1 tháng)"
    assert order["items"][0]["expired"] is True

    order_id = order["id"]
    rec = client.get(f"/orders/{order_id}/refund-recommendation", headers=auth_headers).json()
    assert rec["recommended_refund"] == 0

    expired = client.get("/orders", params={"status": "expired"}, headers=auth_headers).json()
    assert [o["id"] for o in expired["orders"]] == [order_id]

    cancelled = client.post(f"/orders/{order_id}/cancel", json={"reason": "khách đổi ý"}, headers=auth_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["refund_info"]["refund_to_customer"] == 0

    again = client.post(f"/orders/{order_id}/cancel", json={"refund_to_customer": 0}, headers=auth_headers)
    assert again.status_code == 409

    stats = client.get("/reports/stats", params={"window": "all"}, headers=auth_headers).json()
    assert stats["stats"] == {"revenue": 40000, "profit": 15000, "order_count": 1}

    listed = client.get("/orders", params={"status": "cancelled", "search": "zalo"}, headers=auth_headers).json()
    assert listed["count"] == 1

    deleted = client.delete(f"/orders/{order_id}", headers=auth_headers).json()
    assert deleted["customer_deleted"] is True
    assert client.get(f"/orders/{order_id}", headers=auth_headers).status_code == 404
    assert client.get("/customers", headers=auth_headers).json() == []


def test_price_and_duration_overrides_over_http(client, auth_headers):
    product_id, variant_id = _create_product(client, auth_headers)

    order = _place(
        client, auth_headers, product_id, variant_id, price_override=35000, usage_time="Vĩnh viễn"
    ).json()

    item = order["items"][0]
    assert item["price_at_sale"] == 35000
    assert item["cost_at_sale"] == 25000
    assert item["usage_time"] == "Vĩnh viễn"
    assert item["expires_at"] is None
    active = client.get("/orders", params={"status": "active"}, headers=auth_headers).json()
    assert active["count"] == 1


def test_order_validation_over_http(client, auth_headers):
    product_id, variant_id = _create_product(client, auth_headers)

    assert _place(client, auth_headers, product_id, "missing").status_code == 400
    assert _place(client, auth_headers, product_id, variant_id, phone="").status_code == 400
    empty = client.post(
        "/orders",
        json={"customer": {"new_customer": {"name": "Lan", "phone": "0901"}}, "items": []},
        headers=auth_headers,
    )
    assert empty.status_code == 400
    assert client.get("/orders", params={"status": "archived"}, headers=auth_headers).status_code == 400
    assert client.get("/orders/missing", headers=auth_headers).status_code == 404


def test_dashboard_and_custom_window(client, auth_headers):
    product_id, variant_id = _create_product(client, auth_headers)
    for i in range(6):
        _place(client, auth_headers, product_id, variant_id, phone=f"09010000{i:02d}")

    dashboard = client.get("/reports/dashboard", params={"window": "today"}, headers=auth_headers).json()
    assert dashboard["stats"]["order_count"] == 6
    assert dashboard["stats"]["revenue"] == 240000
    assert len(dashboard["recent_orders"]) == 5

    bad = client.get(
        "/reports/stats",
        params={"window": "custom", "start": "2024-03-10", "end": "2024-03-01"},
        headers=auth_headers,
    )
    assert bad.status_code == 400
    custom = client.get(
        "/reports/stats",
        params={"window": "custom", "start": "2020-01-01", "end": "2020-01-31"},
        headers=auth_headers,
    ).json()
    assert custom["stats"]["order_count"] == 0
