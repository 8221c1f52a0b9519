from delivery.api.errors import register_exception_handlers
from delivery.api.routes import (
    bordereau_router,
    delivery_router,
    deposit_router,
    order_router,
    scan_router,
)

routers = [order_router, delivery_router, bordereau_router, deposit_router, scan_router]

__all__ = [
    "bordereau_router",
    "delivery_router",
    "deposit_router",
    "order_router",
    "register_exception_handlers",
    "routers",
    "scan_router",
]
