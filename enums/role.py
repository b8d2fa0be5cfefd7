from enum import Enum


class Role(str, Enum):
    ADMIN = "Admin"
    SUPPLIER = "Supplier"
    USER = "User"
