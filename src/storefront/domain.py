"""Domain initialization and configuration.

Every aggregate that takes part in checkout is registered on this one domain
so a single unit of work can span the cart, the products whose stock is
deducted and the order being written.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
