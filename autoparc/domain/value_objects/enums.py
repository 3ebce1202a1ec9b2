"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class CarStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class EntityType(str, Enum):
    CAR = "car"
    OPERATOR = "operator"


class ActionType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    UNASSIGN = "unassign"
