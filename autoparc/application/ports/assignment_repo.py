"""Port interface for assignment persistence."""

from abc import ABC, abstractmethod
from datetime import date

from autoparc.domain.entities.assignment import Assignment, AssignmentFilter


class ActiveAssignmentExists(Exception):
    """The store rejected an insert because an active row already exists.

    ``dimension`` is ``"car"`` or ``"operator"``, naming the uniqueness
    constraint that fired.
    """

    def __init__(self, dimension: str):
        super().__init__(f"active assignment already exists for this {dimension}")
        self.dimension = dimension


class AssignmentRepository(ABC):
    @abstractmethod
    async def insert(self, assignment: Assignment) -> Assignment:
        """Persist a new active assignment.

        Raises ActiveAssignmentExists when the store's uniqueness guard on
        open rows rejects it.
        """
        ...

    @abstractmethod
    async def find_active_by_car(self, car_id: str) -> Assignment | None:
        ...

    @abstractmethod
    async def find_active_by_operator(self, operator_id: str) -> Assignment | None:
        ...

    @abstractmethod
    async def close_active(
        self, assignment_id: str, end_date: date, notes: str | None
    ) -> bool:
        """Set end_date on the row only if it is still open.

        Returns False when the row does not exist or was already closed.
        """
        ...

    @abstractmethod
    async def query_history(self, filters: AssignmentFilter) -> list[Assignment]:
        """Rows matching *filters*, newest start_date first."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...
