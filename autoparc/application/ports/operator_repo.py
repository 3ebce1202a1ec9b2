"""Port interface for operator persistence."""

from abc import ABC, abstractmethod

from autoparc.domain.entities.operator import Operator, OperatorFilter, OperatorListItem


class DuplicateEmployeeNumber(Exception):
    """The store rejected an operator because its employee number is taken."""


class OperatorRepository(ABC):
    @abstractmethod
    async def save(self, operator: Operator) -> Operator:
        """Insert a new operator. Raises DuplicateEmployeeNumber on a key clash."""
        ...

    @abstractmethod
    async def get_by_id(self, operator_id: str) -> Operator | None:
        ...

    @abstractmethod
    async def get_by_employee_number(self, employee_number: str) -> Operator | None:
        ...

    @abstractmethod
    async def find_all(self, filters: OperatorFilter) -> tuple[list[OperatorListItem], int]:
        """One page of operators with their current car, and the total match count."""
        ...

    @abstractmethod
    async def update(self, operator_id: str, values: dict) -> None:
        ...

    @abstractmethod
    async def soft_delete(self, operator_id: str) -> None:
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...
