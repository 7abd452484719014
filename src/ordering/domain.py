"""Ordering bounded context — carts, orders, stock reservation and checkout profiles.

Every aggregate the checkout path writes to lives in this one domain so that
order assembly and the paid transition run inside a single unit of work.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
