from datetime import datetime
from utils.normalize import normalize_order, normalize_status, parse_timestamp


def test_canonical_row_passes_through():
    raw = {
        "id": 7,
        "customer_name": "Karim",
        "phone": "01811111111",
        "address": "Mirpur 10, Dhaka",
        "total_amount": 1230.0,
        "status": "processing",
        "created_at": datetime(2024, 4, 10, 9, 30),
        "items": [{"product_id": 1, "product_name": "Shirt", "quantity": 2, "price": 600}],
    }

    order = normalize_order(raw)

    assert order["id"] == 7
    assert order["customer_name"] == "Karim"
    assert order["total_amount"] == 1230.0
    assert order["status"] == "processing"
    assert order["created_at"] == datetime(2024, 4, 10, 9, 30)
    assert order["is_local"] is False
    assert order["items"] == [{"product_id": 1, "product_name": "Shirt", "quantity": 2, "price": 600.0}]


def test_field_name_variants_are_mapped():
    raw = {
        "id": 1712345678901,
        "customerName": "Salma",
        "phone": "01911111111",
        "shippingAddress": "Agrabad, Chattogram",
        "totalAmount": "450",
        "date": "2024-04-10T09:30:00Z",
        "isLocal": True,
        "items": [{"productId": 3, "name": "Scarf", "quantity": "1", "price": "450"}],
    }

    order = normalize_order(raw)

    assert order["customer_name"] == "Salma"
    assert order["address"] == "Agrabad, Chattogram"
    assert order["total_amount"] == 450.0
    assert order["created_at"] == datetime(2024, 4, 10, 9, 30)
    assert order["is_local"] is True
    assert order["items"][0]["product_id"] == 3
    assert order["items"][0]["product_name"] == "Scarf"
    assert order["items"][0]["quantity"] == 1


def test_total_price_variant():
    assert normalize_order({"id": 1, "total_price": 99})["total_amount"] == 99.0
    assert normalize_order({"id": 1, "total": 12.5})["total_amount"] == 12.5


def test_missing_fields_get_defaults():
    order = normalize_order({})

    assert str(order["id"]).startswith("local-")
    assert order["customer_name"] == "Unknown"
    assert order["total_amount"] == 0.0
    assert order["status"] == "pending"
    assert order["payment_method"] == "cash_on_delivery"
    assert order["created_at"] == datetime(1970, 1, 1)
    assert order["items"] == []


def test_missing_id_and_timestamp_are_stable():
    raw = {"name": "Legacy", "total": 100}

    first = normalize_order(raw)
    second = normalize_order(dict(raw))

    assert first["id"] == second["id"]
    assert first["created_at"] == second["created_at"]
    assert normalize_order({"name": "Other", "total": 100})["id"] != first["id"]


def test_flat_rows_have_no_items():
    raw = {"id": 2, "items": [{"product_id": 1, "quantity": 1, "price": 10}]}

    assert normalize_order(raw, include_items=False)["items"] == []


def test_item_without_name_gets_placeholder():
    order = normalize_order({"id": 1, "items": [{"product_id": 12345, "quantity": 1, "price": 10}]})

    assert order["items"][0]["product_name"] == "Unknown product (1234)"


def test_item_row_id_is_not_a_product_id():
    order = normalize_order({"id": 1, "items": [{"id": 55, "product_id": None, "product_name": "Old", "quantity": 1, "price": 10}]})

    assert order["items"][0]["product_id"] is None


def test_bengali_status_labels():
    assert normalize_status("অপেক্ষমান") == "pending"
    assert normalize_status("শিপিং-এ") == "shipped"
    assert normalize_status("বাতিল") == "cancelled"
    assert normalize_status("canceled") == "cancelled"
    assert normalize_status("Delivered") == "delivered"


def test_unknown_status_defaults_to_pending():
    assert normalize_status("lost-in-transit") == "pending"
    assert normalize_status(None) == "pending"


def test_parse_timestamp_variants():
    assert parse_timestamp("2024-04-10T15:30:00+06:00") == datetime(2024, 4, 10, 9, 30)
    assert parse_timestamp(0) == datetime(1970, 1, 1)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_raw_is_not_modified():
    raw = {"id": 1, "totalAmount": 5, "status": "বাতিল"}
    snapshot = dict(raw)

    normalize_order(raw)

    assert raw == snapshot
