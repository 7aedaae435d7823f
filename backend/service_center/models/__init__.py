from .base import Base
from .activity_log import ActivityLog
from .catalog import Category, Product, SparePart
from .customer import Customer
from .service_center import ServiceCenter
from .service_request import ServiceRequest, ServiceRequestFollowUp
from .user import User
from .warehouse import InventoryItem, PartsTransfer, Warehouse

__all__ = [
    "Base",
    "User",
    "ServiceCenter",
    "Customer",
    "Category",
    "Product",
    "SparePart",
    "ServiceRequest",
    "ServiceRequestFollowUp",
    "Warehouse",
    "InventoryItem",
    "PartsTransfer",
    "ActivityLog",
]
