import re
from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

NAME_RE = re.compile(r"^[A-Za-z][A-Za-z\s'.-]{0,99}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
BLOOD_GROUP_RE = re.compile(r"^(A|B|AB|O)[+-]$")


def form_data(form) -> dict:
    """Drop blank inputs so optional fields fall back to their defaults."""
    return {k: v.strip() for k, v in form.items() if v is not None and v.strip()}


def describe_errors(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(p) for p in err["loc"]) or "form"
        parts.append(f"{field.replace('_', ' ')}: {err['msg']}")
    return "; ".join(parts)


class PatientForm(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = None
    address: Optional[str] = None
    chart_id: Optional[int] = Field(None, gt=0)
    date_of_birth: Optional[date] = None
    gender: Optional[Literal["male", "female", "other"]] = None
    blood_group: Optional[str] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=255)
    emergency_contact_phone: Optional[str] = None
    allergies: Optional[str] = None
    notes: Optional[str] = None
    status: Literal["active", "inactive", "critical"] = "active"
    assigned_doctor_id: Optional[int] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v):
        if not NAME_RE.match(v.strip()):
            raise ValueError("Invalid name format. Only letters allowed.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v is not None and not EMAIL_RE.match(v):
            raise ValueError("Invalid email address.")
        return v.lower() if v else v

    # --- phone validation ---
    @field_validator("phone", "emergency_contact_phone")
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        # Remove all characters except digits
        clean = re.sub(r"[^\d]", "", v)

        # Length validation (10–15 digits)
        if not (10 <= len(clean) <= 15):
            raise ValueError("Phone number must contain 10–15 digits.")

        # Allow + only if it was originally at the start
        if v.strip().startswith("+"):
            clean = "+" + clean
        return clean

    @field_validator("blood_group")
    @classmethod
    def validate_blood_group(cls, v):
        if v is not None and not BLOOD_GROUP_RE.match(v.upper()):
            raise ValueError("Blood group must look like A+, O- or AB+.")
        return v.upper() if v else v

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, v):
        if v is not None and v > date.today():
            raise ValueError("Date of birth cannot be in the future.")
        return v


class AppointmentForm(BaseModel):
    patient_id: int
    doctor_id: int
    day: date
    start_time: time
    duration: int = Field(30, ge=5, le=480)
    type: Literal["general", "follow-up", "emergency"] = "general"
    status: Optional[
        Literal["pending", "confirmed", "completed", "cancelled", "no-show", "rescheduled"]
    ] = None
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    notes: Optional[str] = None

    @property
    def start(self) -> datetime:
        return datetime.combine(self.day, self.start_time)

    def to_fields(self) -> dict:
        fields = self.model_dump(exclude={"day", "start_time"})
        fields["date"] = self.start
        return fields


class MedicineForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    brand: Optional[str] = Field(None, max_length=255)
    form: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    last_prescribed_date: Optional[date] = None

    @field_validator("form")
    @classmethod
    def normalize_form(cls, v):
        return v.strip().title() if v else v

    def to_fields(self) -> dict:
        fields = self.model_dump()
        if self.last_prescribed_date:
            fields["last_prescribed_date"] = datetime.combine(self.last_prescribed_date, datetime.min.time())
        return fields
