from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SalesInterval(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
