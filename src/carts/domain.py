"""Carts bounded context — session carts, line items, and abandonment.

Handles the cart lifecycle (active -> abandoned -> removed), keeps each
cart's total price consistent with its line items, and reclaims idle carts
through the periodic abandonment sweep.
"""

from protean.domain import Domain

from carts.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
carts = Domain(name="carts")
