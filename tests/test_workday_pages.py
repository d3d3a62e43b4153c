"""Tests for applicant profiles and Workday page step definitions."""

import json

import pytest

from formfiller.components.locators import BySectionId
from formfiller.components.models import FieldKind, MatchTier, StrategyUsed
from formfiller.config import SequencePolicy
from formfiller.pages import (
    PAGE_BUILDERS,
    SECTION_ANCHORS,
    ApplicantProfile,
    ProfileError,
    WorkExperience,
    build_page_steps,
    load_profile,
)
from formfiller.pages.workday import (
    DEGREE_CODES,
    PHONE_TYPE_CODES,
    education_steps,
    my_information_steps,
    work_experience_steps,
)
from tests.fake_tree import FakeNode, checkbox, combobox, controlled_input

PROFILE = {
    "account": {"email": "user@example.com", "password": "S3cret!pass"},
    "personal": {
        "first_name": "Cole",
        "last_name": "Developer",
        "phone_number": "(520) 870-0922",
        "previous_worker": False,
    },
    "address": {"line1": "123 Main St", "city": "Tucson", "state": "Arizona", "postal_code": "85701"},
    "work_experience": [{
        "job_title": "Software Engineer",
        "company": "Tech Corp",
        "start_date": "01/2020",
        "end_date": "12/2023",
        "description": "Built things",
    }],
    "education": [{
        "school_name": "University of Technology",
        "degree": "Masters",
        "field_of_study": "Computer Science",
        "first_year": "2018",
        "last_year": "2020",
    }],
}

FAST = SequencePolicy(max_attempts=2, retry_backoff_ms=100, inter_step_delay_ms=0, locate_timeout_ms=0)


@pytest.fixture
def profile():
    return ApplicantProfile.from_dict(PROFILE)


class TestProfile:
    def test_load_profile(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps(PROFILE), encoding="utf-8")

        profile = load_profile(path)

        assert profile.account.email == "user@example.com"
        assert profile.personal.phone_type == "Mobile"
        assert profile.personal.source == "LinkedIn"
        assert profile.address.state == "Arizona"
        assert profile.work_experience[0].end_date == "12/2023"
        assert profile.work_experience[0].location is None
        assert profile.education[0].degree == "Masters"

    def test_document_must_be_an_object(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ProfileError, match="JSON object"):
            load_profile(path)

    def test_missing_required_value(self):
        with pytest.raises(ProfileError, match="'personal' is missing 'last_name'"):
            ApplicantProfile.from_dict({"personal": {"first_name": "Cole", "last_name": " ", "phone_number": "1"}})

    @pytest.mark.parametrize("section, data", [
        ("personal", {"first_name": "Cole", "last_name": "Developer", "phone_number": "1", "previous_worker": "false"}),
        ("account", {"email": "user@example.com", "password": "pw", "accept_terms": "no"}),
        ("work_experience", [{"job_title": "Engineer", "company": "Acme", "start_date": "01/2020",
                              "currently_work_here": 1}]),
    ])
    def test_flags_must_be_booleans(self, section, data):
        with pytest.raises(ProfileError, match="must be true or false"):
            ApplicantProfile.from_dict({section: data})

    def test_missing_flags_use_defaults(self):
        profile = ApplicantProfile.from_dict({
            "account": {"email": "user@example.com", "password": "pw", "accept_terms": None},
            "personal": {"first_name": "Cole", "last_name": "Developer", "phone_number": "1"},
        })

        assert profile.account.accept_terms is True
        assert profile.personal.previous_worker is False

    def test_sections_are_optional(self):
        profile = ApplicantProfile.from_dict({})

        assert profile.account is None
        assert profile.work_experience == ()


class TestStepBuilders:
    def test_my_information_uses_codes(self, profile):
        steps = {s.logical_name: s for s in my_information_steps(profile.personal, profile.address)}

        assert steps["Phone Device Type"].option_code == PHONE_TYPE_CODES["Mobile"]
        assert steps["Previously Worked Here"].kind is FieldKind.RADIO
        assert steps["Previously Worked Here"].value == "false"
        assert steps["State"].option_code is not None
        assert steps["Postal Code"].value == "85701"

    def test_unknown_state_matched_by_text(self, profile):
        address = PROFILE["address"] | {"state": "Vermont"}
        profile = ApplicantProfile.from_dict(PROFILE | {"address": address})

        state = [s for s in my_information_steps(profile.personal, profile.address) if s.logical_name == "State"][0]

        assert state.option_code is None

    def test_no_address_steps_without_address(self, profile):
        names = [s.logical_name for s in my_information_steps(profile.personal)]

        assert "City" not in names

    def test_work_experience_order(self, profile):
        steps = work_experience_steps(profile.work_experience[0])

        assert [s.logical_name for s in steps] == [
            "Add Work Experience", "Job Title", "Company", "I currently work here", "From", "To", "Role Description",
        ]
        assert steps[0].kind is FieldKind.CLICK
        assert steps[1].candidate_selectors[0] == BySectionId("workExperience", "jobTitle")
        assert steps[4].kind is FieldKind.DATE_PAIR
        assert steps[4].companion_selectors

    def test_current_job_has_no_end_date(self):
        job = WorkExperience(
            job_title="Engineer", company="Tech Corp", start_date="02/2024", end_date="03/2025",
            currently_work_here=True,
        )

        names = [s.logical_name for s in work_experience_steps(job, add_section=False)]

        assert "To" not in names
        assert "Add Work Experience" not in names

    def test_education_degree_code(self, profile):
        steps = education_steps(profile.education[0])

        degree = [s for s in steps if s.logical_name == "Degree"][0]
        assert degree.option_code == DEGREE_CODES["Masters"]
        assert [s.logical_name for s in steps][-2:] == ["First Year Attended", "Last Year Attended"]


class TestBuildPageSteps:
    def test_known_pages(self):
        assert set(PAGE_BUILDERS) == {"create-account", "my-information", "my-experience"}

    def test_unknown_page(self, profile):
        with pytest.raises(ValueError, match="Unknown page 'review'"):
            build_page_steps("review", profile)

    def test_submit_appends_footer_button(self, profile):
        plain = build_page_steps("my-information", profile)
        submitted = build_page_steps("my-information", profile, submit=True)

        assert submitted[:-1] == plain
        assert submitted[-1].logical_name == "Save and Continue"

    def test_create_account_already_submits(self, profile):
        steps = build_page_steps("create-account", profile, submit=True)

        assert steps[-1].logical_name == "Create Account"

    def test_my_experience_fills_first_entries(self, profile):
        names = [s.logical_name for s in build_page_steps("my-experience", profile)]

        assert names.count("Add Work Experience") == 1
        assert names.count("Add Education") == 1

    def test_missing_section(self):
        with pytest.raises(ProfileError, match="'account'"):
            build_page_steps("create-account", ApplicantProfile())


class TestPagesEndToEnd:
    @pytest.mark.asyncio
    async def test_create_account(self, tree, make_sequencer, profile, log_messages):
        email = tree.add(controlled_input("input-4"))
        password = tree.add(controlled_input("input-5", type="password"))
        verify = tree.add(controlled_input("input-6", type="password"))
        terms = tree.add(checkbox("input-8"))
        submit = tree.add(FakeNode("div", {"data-automation-id": "click_filter", "role": "button"}))

        report = await make_sequencer().run(build_page_steps("create-account", profile), FAST)

        assert report.all_succeeded, report.summary()
        assert email.state["value"] == "user@example.com"
        assert password.state["value"] == verify.state["value"] == "S3cret!pass"
        assert terms.checked is True
        assert submit.clicks == 1
        assert not any("S3cret!pass" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_add_education_section(self, tree, make_sequencer, profile):
        add_button = tree.add(FakeNode("button", {"data-automation-id": "add-button"}, text="Add"))
        rendered = {}

        def render_section(_node):
            rendered["school"] = tree.add(controlled_input("education-3--schoolName"))
            rendered["degree"] = combobox(tree, "education-3--degree", [
                ("Bachelor's Degree", "b1"),
                ("Master of Science", DEGREE_CODES["Masters"]),
            ])
            rendered["study"] = tree.add(controlled_input("education-3--fieldOfStudy"))
            rendered["first"] = tree.add(controlled_input("education-3--firstYearAttended-dateSectionYear-input"))
            rendered["last"] = tree.add(controlled_input("education-3--lastYearAttended-dateSectionYear-input"))

        add_button.on_click = render_section
        school = profile.education[0]

        report = await make_sequencer(sections=SECTION_ANCHORS).run(education_steps(school), FAST)

        assert report.all_succeeded, report.summary()
        assert rendered["school"].state["value"] == "University of Technology"
        assert rendered["degree"].state["selected"] == ("Master of Science", DEGREE_CODES["Masters"])
        assert rendered["study"].value == "Computer Science"
        assert rendered["first"].value == "2018"
        assert rendered["last"].value == "2020"
        degree = [r for r in report if r.field_name == "Degree"][0]
        assert degree.match_tier is MatchTier.VALUE_CODE
        assert degree.strategy_used is StrategyUsed.INTERNAL_STATE
        school_result = [r for r in report if r.field_name == "School or University"][0]
        assert school_result.selector_index == 0
