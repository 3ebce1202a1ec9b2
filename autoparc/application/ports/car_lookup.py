"""Port interface for read-only car lookups."""

from abc import ABC, abstractmethod

from autoparc.domain.entities.car import Car


class CarLookup(ABC):
    @abstractmethod
    async def get_by_id(self, car_id: str) -> Car | None:
        ...
