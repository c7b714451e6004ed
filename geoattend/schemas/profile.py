import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_name: str
    phone_number: str
    matric_number: str
    department: Optional[str] = None
    level: Optional[str] = None

    @field_validator("full_name", "phone_number", "matric_number")
    @classmethod
    def _required_text(cls, value: str, info) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError(f"{info.field_name} is required")
        return text

    @field_validator("phone_number")
    @classmethod
    def _valid_phone(cls, value: str) -> str:
        if not PHONE_RE.fullmatch(value):
            raise ValueError("Please enter a valid phone number")
        return value

    @field_validator("department", "level")
    @classmethod
    def _optional_text(cls, value: Optional[str]) -> Optional[str]:
        text = str(value or "").strip()
        return text or None


class ProfileOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    matric_number: Optional[str] = None
    department: Optional[str] = None
    level: Optional[str] = None
    profile_completed: bool = False
