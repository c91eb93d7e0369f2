"""Employee records, the edit draft and the wire envelope of the employee service."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class Employee(BaseModel):
    """One directory record as returned by the employee service."""

    employee_tag: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("employee_tag", "employeeTag"),
    )
    username: str
    email: str
    phone_number: str = Field(..., alias="phoneNumber")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @field_validator("username", "email", "phone_number", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        # nullable columns on the PHP side arrive as null
        return "" if value is None else value


class EditDraft(BaseModel):
    """Editable copy of an employee's fields held while an edit is open."""

    username: str = ""
    email: str = ""
    phone_number: str = Field(default="", alias="phoneNumber")
    # write-only, never echoed back to callers
    password: str = Field(default="", exclude=True, repr=False)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_employee(cls, employee: Employee) -> EditDraft:
        return cls(
            username=employee.username,
            email=employee.email,
            phone_number=employee.phone_number,
            password="",
        )


class UpdatePayload(BaseModel):
    """Body of the employee update call."""

    employees_tag: str
    username: str
    email: str
    phone_number: str = Field(..., alias="phoneNumber")
    password: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_draft(cls, employee: Employee, draft: EditDraft) -> UpdatePayload:
        return cls(
            employees_tag=employee.employee_tag,
            username=draft.username,
            email=draft.email,
            phone_number=draft.phone_number,
            password=draft.password or "",
        )


class ApiEnvelope(BaseModel):
    status: str
    data: Any = None
    message: str | None = None


class DirectoryState(BaseModel):
    """Snapshot of the directory store."""

    records: list[Employee] = []
    loading: bool = False
    selected: Employee | None = None
    draft: EditDraft | None = None
    saving: bool = False

    @model_validator(mode="after")
    def _draft_follows_selection(self) -> DirectoryState:
        if (self.selected is None) != (self.draft is None):
            raise ValueError("draft must be present exactly when a record is selected")
        return self


class CapabilityFlags(BaseModel):
    export_pdf: bool = False
    export_spreadsheet: bool = False
    edit_record: bool = False


class DraftUpdate(BaseModel):
    """Request body for changing one or more draft fields."""

    username: str | None = None
    email: str | None = None
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    password: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class DirectoryView(BaseModel):
    """What the presentation layer renders for one request."""

    loading: bool
    saving: bool
    total: int
    search: str = ""
    records: list[Employee]
    selected: Employee | None = None
    draft: EditDraft | None = None
    capabilities: CapabilityFlags


class SaveResult(BaseModel):
    saved: bool
    error: str | None = None
