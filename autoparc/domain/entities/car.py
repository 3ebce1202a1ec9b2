"""Car entity — read-only view of a fleet vehicle."""

from dataclasses import dataclass

from autoparc.domain.value_objects.enums import CarStatus


@dataclass
class Car:
    id: str
    license_plate: str
    status: CarStatus
    brand: str | None = None
    model: str | None = None

    def is_assignable(self) -> bool:
        return self.status == CarStatus.ACTIVE
