from .profile import (
    AccountDetails,
    AddressInfo,
    ApplicantProfile,
    Education,
    PersonalInfo,
    ProfileError,
    WorkExperience,
    load_profile
)
from .workday import PAGE_BUILDERS, SECTION_ANCHORS, build_page_steps

__all__ = [
    'AccountDetails',
    'AddressInfo',
    'ApplicantProfile',
    'Education',
    'PAGE_BUILDERS',
    'PersonalInfo',
    'ProfileError',
    'SECTION_ANCHORS',
    'WorkExperience',
    'build_page_steps',
    'load_profile'
]
