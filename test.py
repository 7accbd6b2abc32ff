import json
import uuid
import pytest
from concurrent.futures import ThreadPoolExecutor
from receipt_api import create_app
from score_store import InMemoryScoreStore

valid_receipts = {
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {
                "shortDescription": "Mountain Dew 12PK",
                "price": "6.49"
            }, {
                "shortDescription": "Emils Cheese Pizza",
                "price": "12.25"
            }, {
                "shortDescription": "Knorr Creamy Chicken",
                "price": "1.26"
            }, {
                "shortDescription": "Doritos Nacho Cheese",
                "price": "3.35"
            }, {
                "shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ",
                "price": "12.00"
            }
        ],
        "total": "35.35"
    }): 28,
    json.dumps({
        "retailer": "M&M Corner Market",
        "purchaseDate": "2022-03-20",
        "purchaseTime": "14:33",
        "items": [
            {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }
        ],
        "total": "9.00"
    }): 109,
    json.dumps({
        "retailer": "Walgreens",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "08:13",
        "total": "2.65",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    }): 15,
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }): 31
}


@pytest.fixture
def store():
    return InMemoryScoreStore()


@pytest.fixture
def app(store):
    app = create_app(store)
    app.config['DEBUG'] = True
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def simple_receipt_skeleton():
    return {
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }


def post_receipt(client, receipt):
    return client.post('/receipts/process', content_type='application/json', data=json.dumps(receipt))


def test_process_valid_receipts(client):
    for test_json, expected_points in valid_receipts.items():
        process_response = client.post('/receipts/process', content_type='application/json', data=test_json)
        assert process_response.status_code == 200
        body = json.loads(process_response.data)
        assert body["points"] == expected_points
        uuid.UUID(body["id"])
        get_response = client.get(f'/receipts/{body["id"]}/points')
        assert get_response.status_code == 200
        assert json.loads(get_response.data) == {"points": expected_points}


def test_process_receipts_unique_ids(client, store, simple_receipt_skeleton):
    receipt_ids = []
    for i in range(10):
        process_response = post_receipt(client, simple_receipt_skeleton)
        receipt_ids.append(json.loads(process_response.data)["id"])
    assert len(set(receipt_ids)) == len(receipt_ids)
    assert len(store) == 10


def test_process_receipts_undecodable_body(client, store):
    for body in ["not json", "{\"retailer\": ", ""]:
        process_response = client.post('/receipts/process', content_type='application/json', data=body)
        assert process_response.status_code == 400
        assert process_response.mimetype == "text/plain"
        assert process_response.get_data(as_text=True).startswith("Invalid JSON")
    assert len(store) == 0


def test_process_receipts_wrong_top_level_shape(client, store):
    for body in ["[]", "42", "\"receipt\"", "null"]:
        process_response = client.post('/receipts/process', content_type='application/json', data=body)
        assert process_response.status_code == 400
        assert process_response.get_data(as_text=True).startswith("Invalid receipt: receipt must be an object")
    assert len(store) == 0


def test_process_receipts_invalid_attribute_types(client, store, simple_receipt_skeleton):
    invalid_elements = [[], 25, 3.88, {}, True]
    for attribute in ["retailer", "purchaseDate", "purchaseTime", "total"]:
        original = simple_receipt_skeleton[attribute]
        for elem in invalid_elements:
            simple_receipt_skeleton[attribute] = elem
            process_response = post_receipt(client, simple_receipt_skeleton)
            assert process_response.status_code == 400
            assert process_response.get_data(as_text=True).startswith(f"Invalid receipt: {attribute} must be a string")
        simple_receipt_skeleton[attribute] = original
    assert len(store) == 0


def test_process_receipts_invalid_items_format(client, simple_receipt_skeleton):
    for elem in [25, 3.88, {}, ""]:
        simple_receipt_skeleton["items"] = elem
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert process_response.get_data(as_text=True).startswith("Invalid receipt: items must be a list")


def test_process_receipts_invalid_item_formats(client, simple_receipt_skeleton):
    for elem in [25, 3.88, [], ""]:
        simple_receipt_skeleton["items"][0] = elem
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert process_response.get_data(as_text=True).startswith("Invalid receipt: item must be an object")

    for attribute in ["shortDescription", "price"]:
        simple_receipt_skeleton["items"][0] = {"shortDescription": "Pepsi - 12-oz", "price": "1.25", attribute: 25}
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert process_response.get_data(as_text=True) == f"Invalid receipt: {attribute} must be a string, got int"


def test_process_receipts_missing_attributes_are_tolerated(client):
    process_response = post_receipt(client, {"retailer": "Target"})
    assert process_response.status_code == 200
    assert json.loads(process_response.data)["points"] == 6


def test_process_receipts_unparsable_purchase_date(client, simple_receipt_skeleton):
    simple_receipt_skeleton["purchaseDate"] = "2022-01-01"
    assert json.loads(post_receipt(client, simple_receipt_skeleton).data)["points"] == 37
    for date in ["test", "2022-02-31", "2023-15-15", "2022-1-1", "", "9999-99-99"]:
        simple_receipt_skeleton["purchaseDate"] = date
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 200
        assert json.loads(process_response.data)["points"] == 31


def test_process_receipts_unparsable_purchase_time(client, simple_receipt_skeleton):
    simple_receipt_skeleton["purchaseTime"] = "15:30"
    assert json.loads(post_receipt(client, simple_receipt_skeleton).data)["points"] == 41
    for time in ["test", "15:99", "99:13", "15-30", "", "15:30:00"]:
        simple_receipt_skeleton["purchaseTime"] = time
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 200
        assert json.loads(process_response.data)["points"] == 31


def test_process_receipts_unparsable_total_and_price(client, simple_receipt_skeleton):
    simple_receipt_skeleton["items"][0] = {"shortDescription": "Dasani", "price": "abc"}
    for total in ["test", "", "1.2.5", "NaN"]:
        simple_receipt_skeleton["total"] = total
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 200
        assert json.loads(process_response.data)["points"] == 6


def test_get_points_nonexistent_id(client):
    res = client.get('/receipts/test/points')
    assert res.status_code == 200
    assert json.loads(res.data) == {"points": 0}


def test_get_points_idempotency(client, simple_receipt_skeleton):
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    for i in range(5):
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert json.loads(get_response.data)["points"] == 31


def test_process_receipts_concurrency(client, store, simple_receipt_skeleton):
    params = [simple_receipt_skeleton] * 500

    def test_post(json_param):
        return client.post('/receipts/process', content_type='application/json', json=json_param).get_json()["id"]

    with ThreadPoolExecutor(max_workers=50) as pool:
        receipt_ids = list(pool.map(test_post, params))
    assert len(set(receipt_ids)) == 500
    assert len(store) == 500


def test_get_points_concurrency(client, simple_receipt_skeleton):
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    params = [receipt_id] * 500

    def test_get(id_param):
        return client.get(f'/receipts/{id_param}/points').get_json()["points"]

    with ThreadPoolExecutor(max_workers=50) as pool:
        assert set(pool.map(test_get, params)) == {31}


def test_process_receipts_amounts_beyond_double_range(client, store, simple_receipt_skeleton):
    for amount in ["1e1000001", "1e99999999"]:
        simple_receipt_skeleton["total"] = amount
        simple_receipt_skeleton["items"][0] = {"shortDescription": "abc", "price": amount}
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 200
        assert json.loads(process_response.data)["points"] == 6
    assert len(store) == 2
