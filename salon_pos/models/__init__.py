from .bill import Bill, BillItem
from .catalog import Category, Service
from .customer import Customer
from .reservation import Reservation
from .setting import Setting
from .staff import Staff, StaffTimeLog

__all__ = [
    "Bill",
    "BillItem",
    "Category",
    "Customer",
    "Reservation",
    "Service",
    "Setting",
    "Staff",
    "StaffTimeLog",
]
