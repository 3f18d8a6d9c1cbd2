"""Unit tests for GradingService."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from academia.exceptions import InvalidRequestError
from academia.grading import GradingService
from academia.store import (
    Enrollment,
    EnrollmentNotFoundError,
    EnrollmentStatus,
    GroupNotFoundError,
    GroupStatus,
    ReportCard,
    ReportCardStatus,
    SchoolStore,
)

PASSING = {
    "SPEAKING": 60,
    "LISTENING": 70,
    "WRITING": 80,
    "VOCABULARY": 90,
    "GRAMMAR": 100,
}


@pytest.fixture
def grading(store: SchoolStore) -> GradingService:
    return GradingService(store)


@pytest.fixture
def group(factory):
    return factory.group(factory.level(factory.course()), factory.teacher())


@pytest.fixture
def enrollment(factory, group):
    return factory.enrollment(factory.student(), group)


@pytest.mark.unit
class TestRecordGrades:
    """Tests for record_grades."""

    def test_records_one_grade_per_type(self, grading: GradingService, enrollment) -> None:
        grades = grading.record_grades(enrollment.id, {"SPEAKING": 75, "READING": "80.5"})

        values = {g.evaluation_type: g.grade_value for g in grades}
        assert values == {"SPEAKING": Decimal("75"), "READING": Decimal("80.5")}

    def test_overwrites_existing_type(self, grading: GradingService, enrollment) -> None:
        grading.record_grades(enrollment.id, {"SPEAKING": 40})
        grades = grading.record_grades(enrollment.id, {"SPEAKING": 85})

        assert [(g.evaluation_type, g.grade_value) for g in grades] == [
            ("SPEAKING", Decimal("85"))
        ]

    def test_unknown_type(self, grading: GradingService, enrollment) -> None:
        with pytest.raises(InvalidRequestError, match="Unknown evaluation type"):
            grading.record_grades(enrollment.id, {"DANCING": 80})

    @pytest.mark.parametrize("value", [-1, 101, "abc", "NaN", "Infinity", "-inf"])
    def test_invalid_value(self, grading: GradingService, enrollment, value) -> None:
        with pytest.raises(InvalidRequestError):
            grading.record_grades(enrollment.id, {"SPEAKING": value})

    def test_invalid_value_writes_nothing(
        self, store: SchoolStore, grading: GradingService, enrollment
    ) -> None:
        with pytest.raises(InvalidRequestError):
            grading.record_grades(enrollment.id, {"SPEAKING": 80, "READING": 150})

        assert grading.record_grades(enrollment.id, {}) == []

    def test_enrollment_not_found(self, grading: GradingService) -> None:
        with pytest.raises(EnrollmentNotFoundError):
            grading.record_grades("missing", {"SPEAKING": 80})


@pytest.mark.unit
class TestIssueReportCard:
    """Tests for issue_report_card."""

    def test_approved_when_average_passes(self, grading: GradingService, enrollment) -> None:
        grading.record_grades(enrollment.id, PASSING)

        card = grading.issue_report_card(enrollment.id, "2025-1")

        assert card.status == ReportCardStatus.APPROVED
        assert card.final_grade == Decimal("66.67")
        assert card.approved_at is not None

    def test_rejected_when_average_fails(self, grading: GradingService, enrollment) -> None:
        grading.record_grades(enrollment.id, {"SPEAKING": 100, "LISTENING": 100})

        card = grading.issue_report_card(enrollment.id, "2025-1")

        assert card.status == ReportCardStatus.REJECTED
        assert card.final_grade == Decimal("33.33")
        assert card.approved_at is None

    def test_rejected_when_not_approved(self, grading: GradingService, enrollment) -> None:
        grading.record_grades(enrollment.id, PASSING)

        card = grading.issue_report_card(enrollment.id, "2025-1", approve=False)

        assert card.status == ReportCardStatus.REJECTED

    def test_reissue_updates_same_card(
        self, store: SchoolStore, grading: GradingService, enrollment
    ) -> None:
        grading.record_grades(enrollment.id, {"SPEAKING": 60})
        first = grading.issue_report_card(enrollment.id, "2025-1")
        grading.record_grades(enrollment.id, PASSING)
        second = grading.issue_report_card(enrollment.id, "2025-1")

        assert first.id == second.id
        assert second.status == ReportCardStatus.APPROVED
        with store.transaction() as session:
            cards = session.execute(select(ReportCard)).scalars().all()
        assert len(cards) == 1

    def test_missing_period(self, grading: GradingService, enrollment) -> None:
        with pytest.raises(InvalidRequestError):
            grading.issue_report_card(enrollment.id, "  ")


@pytest.mark.unit
class TestGroupLifecycle:
    """Tests for submit_grades and close_group."""

    def test_submit_grades(self, grading: GradingService, group) -> None:
        submitted = grading.submit_grades(group.id)

        assert submitted.status == GroupStatus.GRADES_SUBMITTED

    def test_submit_twice_rejected(self, grading: GradingService, group) -> None:
        grading.submit_grades(group.id)

        with pytest.raises(InvalidRequestError):
            grading.submit_grades(group.id)

    def test_submit_completed_group_rejected(self, grading: GradingService, group) -> None:
        grading.close_group(group.id)

        with pytest.raises(InvalidRequestError):
            grading.submit_grades(group.id)

    def test_close_group_completes_active_enrollments(
        self, store: SchoolStore, grading: GradingService, factory, group
    ) -> None:
        active = factory.enrollment(factory.student(), group)
        withdrawn = factory.enrollment(factory.student(), group, EnrollmentStatus.WITHDRAWN)

        closed = grading.close_group(group.id)

        assert closed.status == GroupStatus.COMPLETED
        with store.transaction() as session:
            assert session.get(Enrollment, active.id).status == EnrollmentStatus.COMPLETED
            assert session.get(Enrollment, withdrawn.id).status == EnrollmentStatus.WITHDRAWN

    def test_group_not_found(self, grading: GradingService) -> None:
        with pytest.raises(GroupNotFoundError):
            grading.close_group("missing")
