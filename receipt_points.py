import logging
import math
import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Sequence

from receipt_model import Receipt, ReceiptItem

logger = logging.getLogger(__name__)

RECEIPT_DATE_FORMAT = '%Y-%m-%d'
RECEIPT_TIME_FORMAT = '%H:%M'
RECEIPT_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
RECEIPT_TIME_PATTERN = re.compile(r"\d{1,2}:\d{2}")
POINTS_RETAILER_NAME_ALPHANUM_CHARACTER = 1
POINTS_TOTAL_HAS_NO_CENTS = 50
POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS = 25
POINTS_ITEMS_COUNT = 5
POINTS_ITEM_DESCRIPTION = Decimal("0.2")
POINTS_ODD_PURCHASE_DAY = 6
POINTS_VALID_PURCHASE_TIME = 10
REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR = 3
REWARD_CENTS_FACTOR = 25
REWARD_TIME_START = time(14, 0)
REWARD_TIME_END = time(16, 0)
MAX_AMOUNT_EXPONENT = 308


def parse_amount(amount: str) -> Optional[Decimal]:
    """
    Parses a decimal amount such as "12.25". Returns None if it is not a finite
    number or lies beyond the range of a double, like "1e400".
    """
    if amount != amount.strip() or "_" in amount:
        return None
    try:
        parsed = Decimal(amount)
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    if parsed.is_zero():
        return Decimal(0)
    if parsed.adjusted() > MAX_AMOUNT_EXPONENT:
        return None
    return parsed


def parse_purchase_date(purchase_date: str) -> Optional[date]:
    if not RECEIPT_DATE_PATTERN.fullmatch(purchase_date):
        return None
    try:
        return datetime.strptime(purchase_date, RECEIPT_DATE_FORMAT).date()
    except ValueError:
        return None


def parse_purchase_time(purchase_time: str) -> Optional[time]:
    if not RECEIPT_TIME_PATTERN.fullmatch(purchase_time):
        return None
    try:
        return datetime.strptime(purchase_time, RECEIPT_TIME_FORMAT).time()
    except ValueError:
        return None


def score_retailer(retailer_name: str) -> int:
    """ One point for every letter or digit in the retailer name """
    return sum(int(c.isalnum()) * POINTS_RETAILER_NAME_ALPHANUM_CHARACTER for c in retailer_name)


def score_round_total(total: str) -> int:
    parsed_total = parse_amount(total)
    if parsed_total is None:
        return 0
    if parsed_total == int(parsed_total):
        return POINTS_TOTAL_HAS_NO_CENTS
    return 0


def score_quarter_total(total: str) -> int:
    """ Rewards totals whose cents are a multiple of 25, truncating anything past the cents """
    parsed_total = parse_amount(total)
    if parsed_total is None:
        return 0
    cents = int((parsed_total - int(parsed_total)) * 100)
    if cents % REWARD_CENTS_FACTOR == 0:
        return POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS
    return 0


def score_item_pairs(items: Sequence[ReceiptItem]) -> int:
    return (len(items) // 2) * POINTS_ITEMS_COUNT


def score_item_descriptions(items: Sequence[ReceiptItem]) -> int:
    """
    For each item whose trimmed description length in UTF-8 bytes is a multiple
    of 3 (empty descriptions included), adds the price multiplied by 0.2 and rounded up.
    Items with an unparsable price are skipped.
    """
    points = 0
    for item in items:
        if len(item.short_description.strip().encode("utf-8")) % REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR != 0:
            continue
        price = parse_amount(item.price)
        if price is None:
            continue
        points += math.ceil(price * POINTS_ITEM_DESCRIPTION)
    return points


def score_purchase_date(purchase_date: str) -> int:
    date_obj = parse_purchase_date(purchase_date)
    if date_obj is not None and date_obj.day % 2 != 0:
        return POINTS_ODD_PURCHASE_DAY
    return 0


def score_purchase_time(purchase_time: str) -> int:
    # both ends of the window are exclusive
    time_obj = parse_purchase_time(purchase_time)
    if time_obj is not None and REWARD_TIME_START < time_obj < REWARD_TIME_END:
        return POINTS_VALID_PURCHASE_TIME
    return 0


def score_breakdown(receipt: Receipt) -> Dict[str, int]:
    """ Calculates the points earned from each rule, keyed by rule name """
    return {
        "retailer": score_retailer(receipt.retailer),
        "round_total": score_round_total(receipt.total),
        "quarter_total": score_quarter_total(receipt.total),
        "item_pairs": score_item_pairs(receipt.items),
        "item_descriptions": score_item_descriptions(receipt.items),
        "purchase_date": score_purchase_date(receipt.purchase_date),
        "purchase_time": score_purchase_time(receipt.purchase_time),
    }


def calculate_points(receipt: Receipt) -> int:
    """ Calculates points earned from each component of the receipt """
    breakdown = score_breakdown(receipt)
    logger.debug("Points breakdown for %r: %s", receipt.retailer, breakdown)
    return sum(breakdown.values())
