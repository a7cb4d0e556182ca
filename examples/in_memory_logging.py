"""Example showing the stored document shape without a MongoDB server.

Run with:
    python examples/in_memory_logging.py
"""

import logging
from pprint import pprint

from mongologpy import InMemoryClientFactory, MongoHandler

factory = InMemoryClientFactory()
handler = MongoHandler(client_factory=factory)

logger = logging.getLogger("examples.orders.OrderService")
logger.addHandler(handler)
logger.setLevel(logging.INFO)

if __name__ == "__main__":
    logger.info("Order placed", extra={"order_id": 7})
    logger.info({"event": "order_paid", "order_id": 7, "amount": 25.0})

    collection = factory.last_client.get_database("mongologpy").get_collection(
        "logevents"
    )
    for document in collection.find():
        pprint(document, sort_dicts=False)

    handler.close()
