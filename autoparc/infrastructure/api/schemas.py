"""Request bodies. Dates stay strings here; the engine parses and reports them."""

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AssignOperatorRequest(_CamelModel):
    operator_id: str = Field(alias="operatorId")
    start_date: str = Field(alias="startDate")  # YYYY-MM-DD
    notes: str | None = None


class UnassignOperatorRequest(_CamelModel):
    end_date: str = Field(alias="endDate")  # YYYY-MM-DD
    notes: str | None = None


class CreateOperatorRequest(_CamelModel):
    employee_number: str = Field(alias="employeeNumber")
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str | None = None
    phone: str | None = None
    department: str | None = None


class UpdateOperatorRequest(_CamelModel):
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    phone: str | None = None
    department: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")
