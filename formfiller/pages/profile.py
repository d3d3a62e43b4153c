"""
Applicant profile: the literal values a page definition writes into a form.

Profiles are plain JSON documents, e.g.

    {
      "account": {"email": "...", "password": "..."},
      "personal": {"first_name": "...", "last_name": "...", "phone_number": "..."},
      "address": {"line1": "...", "city": "...", "state": "Arizona", "postal_code": "85701"},
      "work_experience": [{"job_title": "...", "company": "...", "start_date": "01/2020"}],
      "education": [{"school_name": "...", "degree": "Masters", "first_year": "2018"}]
    }
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union


class ProfileError(ValueError):
    """Raised when a profile document is missing a required value."""


def _required(data: Dict[str, Any], key: str, section: str) -> str:
    value = data.get(key)
    if value is None or str(value).strip() == "":
        raise ProfileError(f"Profile section '{section}' is missing '{key}'")
    return str(value)


def _optional(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return None if value is None or str(value).strip() == "" else str(value)


def _flag(data: Dict[str, Any], key: str, section: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ProfileError(f"Profile section '{section}': '{key}' must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class AccountDetails:
    email: str
    password: str
    accept_terms: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountDetails":
        return cls(
            email=_required(data, "email", "account"),
            password=_required(data, "password", "account"),
            accept_terms=_flag(data, "accept_terms", "account", True),
        )


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str
    last_name: str
    phone_number: str
    phone_type: str = "Mobile"
    source: str = "LinkedIn"
    previous_worker: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonalInfo":
        return cls(
            first_name=_required(data, "first_name", "personal"),
            last_name=_required(data, "last_name", "personal"),
            phone_number=_required(data, "phone_number", "personal"),
            phone_type=data.get("phone_type") or "Mobile",
            source=data.get("source") or "LinkedIn",
            previous_worker=_flag(data, "previous_worker", "personal", False),
        )


@dataclass(frozen=True)
class AddressInfo:
    line1: str
    city: str
    state: str
    postal_code: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AddressInfo":
        return cls(
            line1=_required(data, "line1", "address"),
            city=_required(data, "city", "address"),
            state=_required(data, "state", "address"),
            postal_code=_required(data, "postal_code", "address"),
        )


@dataclass(frozen=True)
class WorkExperience:
    """One job. Dates are 'MM/YYYY'."""
    job_title: str
    company: str
    start_date: str
    end_date: Optional[str] = None
    location: Optional[str] = None
    currently_work_here: bool = False
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkExperience":
        return cls(
            job_title=_required(data, "job_title", "work_experience"),
            company=_required(data, "company", "work_experience"),
            start_date=_required(data, "start_date", "work_experience"),
            end_date=_optional(data, "end_date"),
            location=_optional(data, "location"),
            currently_work_here=_flag(data, "currently_work_here", "work_experience", False),
            description=_optional(data, "description"),
        )


@dataclass(frozen=True)
class Education:
    """One school. Years are 'YYYY'."""
    school_name: str
    degree: str
    field_of_study: Optional[str] = None
    first_year: Optional[str] = None
    last_year: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Education":
        return cls(
            school_name=_required(data, "school_name", "education"),
            degree=_required(data, "degree", "education"),
            field_of_study=_optional(data, "field_of_study"),
            first_year=_optional(data, "first_year"),
            last_year=_optional(data, "last_year"),
        )


@dataclass(frozen=True)
class ApplicantProfile:
    """Everything a run may write. Sections a page does not need may be absent."""
    account: Optional[AccountDetails] = None
    personal: Optional[PersonalInfo] = None
    address: Optional[AddressInfo] = None
    work_experience: Tuple[WorkExperience, ...] = field(default_factory=tuple)
    education: Tuple[Education, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicantProfile":
        return cls(
            account=AccountDetails.from_dict(data["account"]) if data.get("account") else None,
            personal=PersonalInfo.from_dict(data["personal"]) if data.get("personal") else None,
            address=AddressInfo.from_dict(data["address"]) if data.get("address") else None,
            work_experience=tuple(WorkExperience.from_dict(w) for w in data.get("work_experience") or []),
            education=tuple(Education.from_dict(e) for e in data.get("education") or []),
        )


def load_profile(path: Union[str, Path]) -> ApplicantProfile:
    """Read an ApplicantProfile from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ProfileError(f"Profile {path} must contain a JSON object")
    return ApplicantProfile.from_dict(data)
