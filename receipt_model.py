from dataclasses import dataclass
from typing import Tuple


class ReceiptFormatError(ValueError):
    """ Raised when a submitted receipt does not have the expected structure """


@dataclass(frozen=True)
class ReceiptItem:
    short_description: str = ""
    price: str = ""


@dataclass(frozen=True)
class Receipt:
    retailer: str = ""
    purchase_date: str = ""
    purchase_time: str = ""
    items: Tuple[ReceiptItem, ...] = ()
    total: str = ""


def _text_field(obj: dict, attribute: str) -> str:
    """ Reads an optional text attribute, treating missing and null values as empty """
    value = obj.get(attribute)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ReceiptFormatError(f"{attribute} must be a string, got {type(value).__name__}")
    return value


def parse_item(item) -> ReceiptItem:
    if item is None:
        return ReceiptItem()
    if not isinstance(item, dict):
        raise ReceiptFormatError(f"item must be an object, got {type(item).__name__}")
    return ReceiptItem(
        short_description=_text_field(item, "shortDescription"),
        price=_text_field(item, "price"),
    )


def parse_receipt(payload) -> Receipt:
    """
    Builds a Receipt from a decoded JSON payload.

    Only the shape of the payload is checked here: whether the total is numeric
    or the date is a real calendar date is left to the scoring rules, which skip
    whatever they cannot parse.

    Raises:
        ReceiptFormatError if the payload is not an object, a text attribute holds
        a non-string value, or items is not a list of objects
    """
    if not isinstance(payload, dict):
        raise ReceiptFormatError(f"receipt must be an object, got {type(payload).__name__}")

    items = payload.get("items")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise ReceiptFormatError(f"items must be a list, got {type(items).__name__}")

    return Receipt(
        retailer=_text_field(payload, "retailer"),
        purchase_date=_text_field(payload, "purchaseDate"),
        purchase_time=_text_field(payload, "purchaseTime"),
        items=tuple(parse_item(item) for item in items),
        total=_text_field(payload, "total"),
    )
