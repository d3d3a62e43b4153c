"""
Step definitions for Workday-hosted application pages.

Workday renders its forms with React and generates element ids at runtime.
Fields of single-instance sections have stable ids (`#name--legalName--firstName`);
repeated sections (work experience, education) prefix every id with the
instance number (`workExperience-6--jobTitle`), which the locator derives from
an anchor field of the section.

Every field lists its most precise selector first and looser ones after it.
"""
from typing import Callable, Dict, List, Optional

from formfiller.components.locators.selectors import (
    ByAriaLabelSubstring,
    ByAttribute,
    ByCss,
    ByExactId,
    ByIdSuffix,
    ByRolePredicate,
    BySectionId,
    SectionAnchor,
)
from formfiller.components.models import EventKind, FieldDescriptor, FieldKind
from formfiller.pages.profile import (
    AccountDetails,
    AddressInfo,
    ApplicantProfile,
    Education,
    PersonalInfo,
    ProfileError,
    WorkExperience,
)

WORK_EXPERIENCE = "workExperience"
EDUCATION = "education"

SECTION_ANCHORS = (
    SectionAnchor(
        name=WORK_EXPERIENCE,
        id_prefix="workExperience-",
        anchor_suffix="jobTitle",
        fallback_prefix="workExperience-6--",
    ),
    SectionAnchor(
        name=EDUCATION,
        id_prefix="education-",
        anchor_suffix="schoolName",
        fallback_prefix="education-17--",
    ),
)

# Option value codes (data-value of the option element)
PHONE_TYPE_CODES: Dict[str, str] = {
    "Fax": "4578467d319e448eba3c755230ecdbba",
    "Mobile": "73218721052a4ce78cf10986b40b54d8",
    "Pager": "2ce42057215546228517e8f7b7e9628c",
    "Telephone": "72dc0213b7234c7896550de6a8653bf3",
}

SOURCE_CODES: Dict[str, str] = {
    "Corporate Website": "3e9cc48c033e010a10025b0ba1014ba8",
    "Glassdoor": "3e9cc48c033e01834779dc0ba101b2a8",
    "Indeed": "3e9cc48c033e010ff41ddc0ba101ada8",
    "LinkedIn": "2572fde58623011bde26ec2557014704",
    "Naukri": "3e9cc48c033e016aff8adc0ba101b3a8",
    "Other": "d0fffe161dae4ddd8b519ace2f6f14c4",
    "Recruiting Event": "3e9cc48c033e012c9e05a00ba10170a8",
}

# Subset; states without a code are matched by visible text
STATE_CODES: Dict[str, str] = {
    "Alabama": "31475924e5494080a8a458bf4fa293ed",
    "Alaska": "c8891443252c4c4ea9427be64d755b9f",
    "American Samoa": "c89eea109e00414ebd2bcf86c3657443",
    "Arizona": "c7b20b0d4bc04711a00900569e9afabd",
    "Arkansas": "cea6c5355e1b4983b5fd0640310385b5",
    "California": "ec3d210e4240442e99a28fa70419aec5",
    "Colorado": "a83d6eabae3b49718c4ce09eeb66fd0b",
    "Connecticut": "bffb3e4c9a4a4542bc6bd075a4c26247",
    "Delaware": "18b4cf9ddb4e4542a39614cb55b4dde7",
    "District of Columbia": "0d2bcd0308f541938f3ae29e7cc69ae0",
    "Florida": "9c1a239b35bd4598856e5393b249b8a1",
    "Georgia": "dec8eabbb13d45bdb159b8e25d896110",
    "Hawaii": "e7634111501844fe83a0b316b16beb08",
    "Massachusetts": "c66d738416b74fb180376cf59cc7ec8f",
    "New York": "9819bf0148e54f89adb255aa7bead635",
    "Texas": "fc77e3a1ab36487f9646d14f7242dd77",
    "Washington": "de9b48948ef8421db97ddf4ea206e931",
}

DEGREE_CODES: Dict[str, str] = {
    "Masters": "c7696be64aee407c81e913565ea97820",
}


def _automation_id(value: str) -> ByAttribute:
    return ByAttribute("data-automation-id", value)


def _text(name: str, selectors, value: str, event_kind: EventKind = EventKind.INPUT,
          kind: FieldKind = FieldKind.TEXT) -> FieldDescriptor:
    return FieldDescriptor(name, selectors, value, kind=kind, event_kind=event_kind)


def save_and_continue_step() -> FieldDescriptor:
    """Footer button that saves the page and moves to the next one."""
    return FieldDescriptor(
        "Save and Continue",
        [
            _automation_id("pageFooterNextButton"),
            ByCss('button[aria-label*="Continue"]'),
            ByCss('button[data-automation-id*="next"]'),
            ByRolePredicate("button", "Save and Continue"),
            ByRolePredicate("button", "Next"),
        ],
        True,
        kind=FieldKind.CLICK,
    )


def create_account_steps(account: AccountDetails) -> List[FieldDescriptor]:
    """Create Account page: email, password twice, terms checkbox, submit."""
    steps = [
        _text("Email Address", [
            ByExactId("input-4"),
            _automation_id("email"),
            ByAriaLabelSubstring("email"),
        ], account.email, EventKind.CHANGE),
        _text("Password", [
            ByExactId("input-5"),
            _automation_id("password"),
            ByCss('input[type="password"]'),
        ], account.password, EventKind.CHANGE),
        _text("Verify New Password", [
            ByExactId("input-6"),
            _automation_id("verifyPassword"),
            ByAriaLabelSubstring("verify"),
        ], account.password, EventKind.CHANGE),
    ]
    if account.accept_terms:
        steps.append(FieldDescriptor(
            "Terms Agreement",
            [
                ByExactId("input-8"),
                _automation_id("createAccountCheckbox"),
                ByCss('input[type="checkbox"]'),
            ],
            True,
            kind=FieldKind.CHECKBOX,
        ))
    steps.append(FieldDescriptor(
        "Create Account",
        [
            _automation_id("click_filter"),
            _automation_id("createAccountSubmitButton"),
            ByRolePredicate("button", "Create Account"),
        ],
        True,
        kind=FieldKind.CLICK,
    ))
    return steps


def my_information_steps(personal: PersonalInfo, address: Optional[AddressInfo] = None) -> List[FieldDescriptor]:
    """My Information page: source, previous-worker radio, name, phone, address."""
    steps = [
        FieldDescriptor(
            "How Did You Hear About Us?",
            [ByExactId("source--source"), ByIdSuffix("--source")],
            personal.source,
            kind=FieldKind.COMBOBOX,
            option_code=SOURCE_CODES.get(personal.source),
        ),
        FieldDescriptor(
            "Previously Worked Here",
            [
                ByCss('input[type="radio"][name="candidateIsPreviousWorker"]'),
                ByCss('[data-automation-id="previousWorker"] input[type="radio"]'),
            ],
            "true" if personal.previous_worker else "false",
            kind=FieldKind.RADIO,
        ),
        _text("First Name", [
            ByExactId("name--legalName--firstName"),
            ByIdSuffix("--firstName"),
            ByAriaLabelSubstring("first name"),
        ], personal.first_name),
        _text("Last Name", [
            ByExactId("name--legalName--lastName"),
            ByIdSuffix("--lastName"),
            ByAriaLabelSubstring("last name"),
        ], personal.last_name),
        FieldDescriptor(
            "Phone Device Type",
            [ByExactId("phoneNumber--phoneType"), ByIdSuffix("--phoneType")],
            personal.phone_type,
            kind=FieldKind.COMBOBOX,
            option_code=PHONE_TYPE_CODES.get(personal.phone_type),
        ),
        _text("Phone Number", [
            ByExactId("phoneNumber--phoneNumber"),
            ByIdSuffix("--phoneNumber"),
            ByCss('input[type="tel"]'),
        ], personal.phone_number),
    ]

    if address is not None:
        steps.extend([
            _text("Address Line 1", [
                ByExactId("address--addressLine1"),
                ByIdSuffix("--addressLine1"),
            ], address.line1),
            _text("City", [
                ByExactId("address--city"),
                ByIdSuffix("--city"),
            ], address.city),
            FieldDescriptor(
                "State",
                [ByExactId("address--countryRegion"), ByIdSuffix("--countryRegion")],
                address.state,
                kind=FieldKind.COMBOBOX,
                option_code=STATE_CODES.get(address.state),
            ),
            _text("Postal Code", [
                ByExactId("address--postalCode"),
                ByIdSuffix("--postalCode"),
            ], address.postal_code),
        ])
    return steps


def _section_field(section: str, suffix: str) -> List:
    return [
        BySectionId(section, suffix),
        ByIdSuffix("--" + suffix),
        _automation_id(suffix),
    ]


def _date_part(section: str, field_name: str, part: str) -> List:
    return [
        BySectionId(section, f"{field_name}-dateSection{part}-input"),
        ByCss(f'[id$="-dateSection{part}-input"][id*="{field_name}"]'),
    ]


def work_experience_steps(job: WorkExperience, add_section: bool = True) -> List[FieldDescriptor]:
    """One Work Experience entry, optionally preceded by its "Add" button."""
    section = WORK_EXPERIENCE
    steps = []
    if add_section:
        steps.append(FieldDescriptor(
            "Add Work Experience",
            [
                ByCss('[role="group"][aria-labelledby="Work-Experience-section"] [data-automation-id="add-button"]'),
                _automation_id("add-button"),
            ],
            True,
            kind=FieldKind.CLICK,
        ))

    steps.extend([
        _text("Job Title", _section_field(section, "jobTitle"), job.job_title, EventKind.CHANGE),
        _text("Company", _section_field(section, "companyName"), job.company, EventKind.CHANGE),
    ])
    if job.location:
        steps.append(_text("Location", _section_field(section, "location"), job.location, EventKind.CHANGE))

    steps.append(FieldDescriptor(
        "I currently work here",
        _section_field(section, "currentlyWorkHere"),
        job.currently_work_here,
        kind=FieldKind.CHECKBOX,
    ))
    steps.append(FieldDescriptor(
        "From",
        _date_part(section, "startDate", "Month"),
        job.start_date,
        kind=FieldKind.DATE_PAIR,
        companion_selectors=_date_part(section, "startDate", "Year"),
    ))
    if job.end_date and not job.currently_work_here:
        steps.append(FieldDescriptor(
            "To",
            _date_part(section, "endDate", "Month"),
            job.end_date,
            kind=FieldKind.DATE_PAIR,
            companion_selectors=_date_part(section, "endDate", "Year"),
        ))
    if job.description:
        steps.append(_text(
            "Role Description",
            _section_field(section, "roleDescription"),
            job.description,
            EventKind.CHANGE,
            FieldKind.TEXTAREA,
        ))
    return steps


def education_steps(school: Education, add_section: bool = True) -> List[FieldDescriptor]:
    """One Education entry, optionally preceded by its "Add" button."""
    section = EDUCATION
    steps = []
    if add_section:
        steps.append(FieldDescriptor(
            "Add Education",
            [
                ByCss('[role="group"][aria-labelledby="Education-section"] [data-automation-id="add-button"]'),
                _automation_id("add-button"),
            ],
            True,
            kind=FieldKind.CLICK,
        ))

    steps.append(_text("School or University", _section_field(section, "schoolName") + [
        ByAriaLabelSubstring("school"),
    ], school.school_name, EventKind.CHANGE))
    steps.append(FieldDescriptor(
        "Degree",
        [BySectionId(section, "degree"), ByIdSuffix("--degree")],
        school.degree,
        kind=FieldKind.COMBOBOX,
        option_code=DEGREE_CODES.get(school.degree),
    ))
    if school.field_of_study:
        steps.append(_text(
            "Field of Study",
            _section_field(section, "fieldOfStudy"),
            school.field_of_study,
            EventKind.CHANGE,
        ))
    for label, field_name, year in (
        ("First Year Attended", "firstYearAttended", school.first_year),
        ("Last Year Attended", "lastYearAttended", school.last_year),
    ):
        if year:
            steps.append(FieldDescriptor(
                label,
                [
                    BySectionId(section, f"{field_name}-dateSectionYear-input"),
                    ByCss(f'[id*="{field_name}"][id*="Year"]'),
                    ByAriaLabelSubstring(f"{label} year"),
                ],
                year,
                kind=FieldKind.DATE_PAIR,
            ))
    return steps


def _require(value, section: str):
    if value is None:
        raise ProfileError(f"Profile has no '{section}' section")
    return value


def _create_account_page(profile: ApplicantProfile) -> List[FieldDescriptor]:
    return create_account_steps(_require(profile.account, "account"))


def _my_information_page(profile: ApplicantProfile) -> List[FieldDescriptor]:
    return my_information_steps(_require(profile.personal, "personal"), profile.address)


def _my_experience_page(profile: ApplicantProfile) -> List[FieldDescriptor]:
    steps = []
    for job in profile.work_experience[:1]:
        steps.extend(work_experience_steps(job))
    for school in profile.education[:1]:
        steps.extend(education_steps(school))
    if not steps:
        raise ProfileError("Profile has neither 'work_experience' nor 'education' entries")
    return steps


PAGE_BUILDERS: Dict[str, Callable[[ApplicantProfile], List[FieldDescriptor]]] = {
    "create-account": _create_account_page,
    "my-information": _my_information_page,
    "my-experience": _my_experience_page,
}


def build_page_steps(page: str, profile: ApplicantProfile, submit: bool = False) -> List[FieldDescriptor]:
    """Steps for a named page, with the footer button appended when `submit` is set."""
    builder = PAGE_BUILDERS.get(page)
    if builder is None:
        raise ValueError(f"Unknown page '{page}'. Available: {', '.join(sorted(PAGE_BUILDERS))}")
    steps = builder(profile)
    if submit and page != "create-account":
        steps.append(save_and_continue_step())
    return steps
