from enum import Enum


class UnitStatus(str, Enum):
    available = "available"
    occupied = "occupied"
    maintenance = "maintenance"
