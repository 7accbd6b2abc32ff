import dataclasses

import pytest

from receipt_model import Receipt, ReceiptFormatError, ReceiptItem, parse_receipt


def test_parse_receipt():
    receipt = parse_receipt({
        "retailer": "Walgreens",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "08:13",
        "total": "2.65",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    })
    assert receipt == Receipt(
        retailer="Walgreens",
        purchase_date="2022-01-02",
        purchase_time="08:13",
        items=(ReceiptItem("Pepsi - 12-oz", "1.25"), ReceiptItem("Dasani", "1.40")),
        total="2.65",
    )


def test_parse_receipt_defaults_missing_and_null_fields():
    assert parse_receipt({}) == Receipt()
    assert parse_receipt({"retailer": None, "items": None, "total": None}) == Receipt()
    assert parse_receipt({"items": [None, {"price": "1.00"}]}).items == (ReceiptItem(), ReceiptItem(price="1.00"))


def test_parse_receipt_ignores_unknown_attributes():
    assert parse_receipt({"retailer": "Target", "cashier": 7}) == Receipt(retailer="Target")


def test_parse_receipt_keeps_unparsable_field_text():
    receipt = parse_receipt({"purchaseDate": "2022-02-31", "total": "lots"})
    assert receipt.purchase_date == "2022-02-31"
    assert receipt.total == "lots"


@pytest.mark.parametrize("payload, message", [
    (None, "receipt must be an object, got NoneType"),
    ([], "receipt must be an object, got list"),
    ({"retailer": 25}, "retailer must be a string, got int"),
    ({"total": 3.88}, "total must be a string, got float"),
    ({"items": {}}, "items must be a list, got dict"),
    ({"items": ["Gatorade"]}, "item must be an object, got str"),
    ({"items": [{"price": 2.25}]}, "price must be a string, got float"),
])
def test_parse_receipt_rejects_malformed_structure(payload, message):
    with pytest.raises(ReceiptFormatError, match=message):
        parse_receipt(payload)


def test_receipt_format_error_is_value_error():
    assert issubclass(ReceiptFormatError, ValueError)


def test_receipt_is_immutable():
    receipt = parse_receipt({"retailer": "Target"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        receipt.retailer = "Walgreens"
