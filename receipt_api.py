import logging
from typing import Optional
from uuid import uuid4

from flask import Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from receipt_model import ReceiptFormatError, parse_receipt
from receipt_points import calculate_points
from score_store import InMemoryScoreStore, ScoreStore

logger = logging.getLogger(__name__)

HOST = "127.0.0.1"
PORT = 8000
LOG_FORMAT = "%(asctime)s  %(name)-16s  %(levelname)-5s  %(message)s"


def bad_request(message: str) -> Response:
    return Response(message, status=400, mimetype="text/plain")


def get_score_store() -> ScoreStore:
    return current_app.config["SCORE_STORE"]


def process_receipt():
    """
    Router for receipt processing requests. The input JSON is decoded into a
    receipt and its points are calculated. A unique id is generated for the
    receipt, the (receipt id -> reward points) mapping is stored and both are
    returned to the user.

    Malformed fields (a non-numeric total, an impossible date) do not fail the
    request, the rules depending on them simply award no points.

    Returns:
        400 Error if the body is not JSON or not shaped like a receipt
        200 OK with the generated receipt id and its points otherwise
    """
    try:
        payload = request.get_json(force=True)
    except BadRequest as e:
        logger.warning("Rejected receipt with undecodable body: %s", e.description)
        return bad_request(f"Invalid JSON: {e.description}")
    try:
        receipt = parse_receipt(payload)
    except ReceiptFormatError as e:
        logger.warning("Rejected malformed receipt: %s", e)
        return bad_request(f"Invalid receipt: {e}")

    points = calculate_points(receipt)
    receipt_id = str(uuid4())
    get_score_store().put(receipt_id, points)
    logger.info("Stored receipt %s with %d points", receipt_id, points)
    return jsonify({"id": receipt_id, "points": points})


def get_points(receipt_id):
    """
    Router for points lookups. The receipt id is used to look up the points
    computed when the receipt was processed.

    Returns:
        200 OK and the points for the receipt, 0 if the receipt id is unknown
    """
    return jsonify({"points": get_score_store().get(receipt_id)})


def create_app(store: Optional[ScoreStore] = None) -> Flask:
    """ Builds the Flask application around the given score store, an empty in-memory one by default """
    app = Flask(__name__)
    app.config["SCORE_STORE"] = store if store is not None else InMemoryScoreStore()
    app.add_url_rule('/receipts/process', view_func=process_receipt, methods=['POST'])
    app.add_url_rule('/receipts/<receipt_id>/points', view_func=get_points, methods=['GET'])
    return app


flask_app = create_app()


def main():
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logger.info("Serving receipt points on %s:%d", HOST, PORT)
    # the score store does its own locking, so requests may be served on separate threads
    flask_app.run(host=HOST, port=PORT, threaded=True)


if __name__ == '__main__':
    main()
