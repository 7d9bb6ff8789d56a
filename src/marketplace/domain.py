"""Marketplace transactional core: domain composition root.

A single Protean domain hosts every aggregate that has to move together at
checkout: orders, catalogue stock, coupons, inventory logs, seller accounts,
branches, finance payments and disputes. Aggregates are plain CQRS
aggregates persisted one document at a time, which is the only write
guarantee the backing store offers.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
