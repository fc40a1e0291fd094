"""
Pydantic models for the portal forms and stored records.

These models define the shape of everything the portal writes:
the three application form sections, the composed application
document, and the admin forms for jobs, stores and admin users.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from portal import validation

COMPUTER_SKILLS = [
    "Computer",
    "Microsoft Excel",
    "Microsoft Word",
    "Quick Books",
    "Data Entry",
]

EQUIPMENT_SKILLS = [
    "Cash Register",
    "Inventory Clerk",
    "Delivery",
    "Pallet Jack",
    "Fork Lift",
    "Maintenance",
    "Security",
    "Technology",
    "Multimedia",
]

POSITIONS = [
    "Cashier",
    "Stock Clerk",
    "Produce Clerk",
    "Deli Clerk",
    "Bakery Clerk",
    "Meat Cutter/Butcher",
    "Seafood Clerk",
    "Grocery Clerk",
    "Customer Service",
    "Bagger",
    "Floral Clerk",
    "Janitor/Custodian",
    "Department Manager",
]

EMPLOYMENT_TYPES = ["Full Time", "Part Time", "Temporary"]
JOB_TYPES = ["Full-time", "Part-time", "Temporary", "Seasonal"]

ELIGIBILITY_FLAGS = (
    "is_under_18",
    "has_work_permit",
    "is_eligible_to_work",
    "can_provide_proof",
    "has_felony",
    "previously_employed",
)

MAX_REFERENCES = 2

# Caps keep the form draft small enough for the session cookie
TEXT_MAX_LENGTH = 100
OTHER_SKILLS_MAX_LENGTH = 500
MAX_TAGS = 15

ShortText = Annotated[str, Field(max_length=TEXT_MAX_LENGTH)]


class ApplicationStatus(str, Enum):
    """Review status of an application."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def parse_yes_no(value: Any) -> bool:
    """Convert yes/no radio values (and checkbox 'on') to booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ("yes", "true", "on", "1")


def _strip(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value)


def _require(value: str, min_length: int, message: str) -> str:
    if len(value) < min_length:
        raise ValueError(message)
    return value


def _check_options(values: List[str], options: List[str], kind: str) -> List[str]:
    unknown = [v for v in values if v not in options]
    if unknown:
        raise ValueError(f"Unknown {kind}: {', '.join(unknown)}")
    return values


# === Application form: personal tab ===

class PreviousEmployment(BaseModel):
    location: ShortText = ""
    position: ShortText = ""


class PersonalInfo(BaseModel):
    """Fields of the personal tab. All of them gate forward navigation."""

    model_config = ConfigDict(validate_default=True)

    first_name: ShortText = ""
    last_name: ShortText = ""
    email: ShortText = ""
    phone: ShortText = ""
    address: ShortText = ""
    city: ShortText = ""
    state: ShortText = ""
    zip_code: ShortText = ""

    is_under_18: bool = False
    has_work_permit: bool = False
    is_eligible_to_work: bool = False
    can_provide_proof: bool = False
    has_felony: bool = False
    previously_employed: bool = False
    previous_employment: PreviousEmployment = Field(default_factory=PreviousEmployment)

    employment_type: Literal["Full Time", "Part Time", "Temporary"] = "Full Time"

    @field_validator(
        "first_name", "last_name", "email", "phone",
        "address", "city", "state", "zip_code",
        mode="before",
    )
    @classmethod
    def strip_personal_text(cls, v: Any) -> str:
        return _strip(v)

    @field_validator(*ELIGIBILITY_FLAGS, mode="before")
    @classmethod
    def yes_no_flags(cls, v: Any) -> bool:
        return parse_yes_no(v)

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        return _require(v, 2, "First name must be at least 2 characters")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        return _require(v, 2, "Last name must be at least 2 characters")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not validation.is_valid_email(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        digits = validation.normalize_phone(v)
        if len(digits) != validation.PHONE_DIGITS:
            raise ValueError("Phone number must be exactly 10 digits")
        return digits

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _require(v, 1, "Address is required")

    @field_validator("city")
    @classmethod
    def validate_city(cls, v: str) -> str:
        return _require(v, 1, "City is required")

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        return _require(v, 2, "State is required")

    @field_validator("zip_code")
    @classmethod
    def validate_zip_code(cls, v: str) -> str:
        if not validation.is_valid_zip(v):
            raise ValueError("Invalid ZIP code")
        return v


# === Application form: education tab ===

class EducationEntry(BaseModel):
    name: ShortText = ""
    address: ShortText = ""
    degree: ShortText = ""
    graduated: bool = False

    @field_validator("name", "address", "degree", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return _strip(v)

    @field_validator("graduated", mode="before")
    @classmethod
    def graduated_flag(cls, v: Any) -> bool:
        return parse_yes_no(v)


class Reference(BaseModel):
    name: ShortText = ""
    address: ShortText = ""
    city: ShortText = ""
    state: ShortText = ""
    zip_code: ShortText = ""
    phone: ShortText = ""
    email: ShortText = ""

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return _strip(v)


class EducationInfo(BaseModel):
    high_school: EducationEntry = Field(default_factory=EducationEntry)
    college: EducationEntry = Field(default_factory=EducationEntry)
    other_education: EducationEntry = Field(default_factory=EducationEntry)
    references: List[Reference] = Field(default_factory=list, max_length=MAX_REFERENCES)


# === Application form: skills tab ===

class SkillsInfo(BaseModel):
    computer_skills: List[ShortText] = Field(default_factory=list, max_length=MAX_TAGS)
    equipment_skills: List[ShortText] = Field(default_factory=list, max_length=MAX_TAGS)
    position_preferences: List[ShortText] = Field(default_factory=list, max_length=MAX_TAGS)
    department_preferences: List[ShortText] = Field(default_factory=list, max_length=MAX_TAGS)
    other_skills: str = Field("", max_length=OTHER_SKILLS_MAX_LENGTH)

    @field_validator("computer_skills")
    @classmethod
    def known_computer_skills(cls, v: List[str]) -> List[str]:
        return _check_options(v, COMPUTER_SKILLS, "computer skill")

    @field_validator("equipment_skills")
    @classmethod
    def known_equipment_skills(cls, v: List[str]) -> List[str]:
        return _check_options(v, EQUIPMENT_SKILLS, "equipment skill")

    @field_validator("position_preferences")
    @classmethod
    def known_positions(cls, v: List[str]) -> List[str]:
        return _check_options(v, POSITIONS, "position")

    @field_validator("other_skills", mode="before")
    @classmethod
    def strip_other_skills(cls, v: Any) -> str:
        return _strip(v)


class ApplicationSubmission(PersonalInfo, EducationInfo, SkillsInfo):
    """The complete form as submitted from the skills tab."""

    job_title: str = ""
    job_location: str = ""

    def to_document(self, resume_url: Optional[str], now: datetime) -> Dict[str, Any]:
        """Compose the stored application row. New rows are always pending."""
        document = self.model_dump()
        document.update({
            "resume_url": resume_url,
            "status": ApplicationStatus.PENDING.value,
            "status_by": None,
            "status_date": None,
            "created_at": now,
        })
        return document


# === Admin forms ===

_FIELD_LABELS = {
    "title": "Title",
    "department": "Department",
    "location": "Location",
    "type": "Job type",
    "description": "Description",
    "requirements": "Requirements",
    "name": "Store name",
    "address": "Address",
    "city": "City",
    "state": "State",
    "zip_code": "ZIP code",
}


def _required_text(v: Any, info: ValidationInfo) -> str:
    v = _strip(v)
    if not v:
        raise ValueError(f"{_FIELD_LABELS.get(info.field_name, info.field_name)} is required")
    return v


def _optional_text(v: Any) -> Optional[str]:
    v = _strip(v)
    return v or None


class JobForm(BaseModel):
    """Create/edit form for a job listing."""

    title: str
    department: str
    location: str
    type: str = "Full-time"
    description: str
    requirements: str
    salary_range: Optional[str] = None
    active: bool = True

    @field_validator("title", "department", "location", "type", "description", "requirements", mode="before")
    @classmethod
    def required_text(cls, v: Any, info: ValidationInfo) -> str:
        return _required_text(v, info)

    @field_validator("salary_range", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        return _optional_text(v)

    @field_validator("active", mode="before")
    @classmethod
    def active_flag(cls, v: Any) -> bool:
        return parse_yes_no(v)


class StoreForm(BaseModel):
    """Create/edit form for a store location."""

    name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    active: bool = True

    @field_validator("name", "address", "city", "state", "zip_code", mode="before")
    @classmethod
    def required_text(cls, v: Any, info: ValidationInfo) -> str:
        return _required_text(v, info)

    @field_validator("phone", "email", "description", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        return _optional_text(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not validation.is_valid_email(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("active", mode="before")
    @classmethod
    def active_flag(cls, v: Any) -> bool:
        return parse_yes_no(v)


class AdminUserForm(BaseModel):
    """Create/edit form for an admin account."""

    username: str
    password: str

    @field_validator("username", mode="before")
    @classmethod
    def validate_username(cls, v: Any) -> str:
        return _require(_strip(v), 3, "Username must be at least 3 characters")

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v: Any) -> str:
        return _require(v or "", 6, "Password must be at least 6 characters")


def format_errors(exc: ValidationError) -> Dict[str, str]:
    """
    Flatten pydantic errors into {field: message} for form re-rendering.

    Nested locations are joined with dots (e.g. "references.2").
    Only the first message per field is kept.
    """
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "form"
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors
