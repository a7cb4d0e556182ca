"""Example application logging to a running MongoDB server.

Run with:
    MONGOLOGPY_HOSTNAME=localhost MONGOLOGPY_WRITE_CONCERN=ACKNOWLEDGED \
        python examples/basic_logging.py

Then inspect the documents:
    mongosh mongologpy --eval 'db.logevents.find().sort({timestamp: -1}).limit(3)'

Connection settings are read from MONGOLOGPY_* environment variables; see
MongoHandlerConfig.from_env for the full list.
"""

import logging

from mongologpy import ExtendedMongoHandler, MongoHandlerConfig, log_context

config = MongoHandlerConfig.from_env()
handler = ExtendedMongoHandler(
    config,
    root_level_properties="application = billing & environment=example",
)

logger = logging.getLogger("examples.billing.InvoiceService")
logger.addHandler(handler)
logger.setLevel(logging.DEBUG)


def charge(invoice_id: int, amount: float) -> None:
    with log_context(invoice_id=invoice_id):
        logger.info("Charging %.2f", amount)
        try:
            if amount <= 0:
                raise ValueError(f"Invalid amount {amount}")
        except ValueError as exc:
            raise RuntimeError("Charge rejected") from exc


if __name__ == "__main__":
    if not handler.is_ready:
        state = handler.state.value
        raise SystemExit(f"MongoDB handler is {state}; is MongoDB running?")

    charge(1001, 25.0)
    try:
        charge(1002, -5.0)
    except RuntimeError:
        # Stored with a two-entry "throwables" array, outermost first
        logger.exception("Payment failed", extra={"customer": "acme"})

    handler.close()
