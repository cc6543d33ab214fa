"""Tests for demand forecasting, staffing needs and credentialing alerts."""

from datetime import date

import pytest

from src.scheduling.forecasting import (
    DemandForecast,
    DemandTrends,
    MonthActivity,
    build_forecast_report,
    calculate_demand_trends,
    calculate_staffing_needs,
    check_credentialing_expirations,
    generate_demand_forecast,
    historical_patient_activity,
    month_activity,
    month_start,
    sessions_in_month,
)

TODAY = date(2026, 3, 4)
FEBRUARY = date(2026, 2, 1)


@pytest.fixture
def patients() -> list[dict]:
    return [
        {
            "id": "p1",
            "dateCreated": "2026-02-10T09:00:00+00:00",
            "clinic": "North",
            "appointments": [
                {"date": "2026-02-03", "status": "scheduled"},
                {"date": "2026-02-17", "status": "completed"},
            ],
        },
        {
            "id": "p2",
            "dateAdded": "2026-01-05",
            "payments": [{"dateOfService": "2026-02-20"}],
        },
        {
            "id": "p3",
            "appointments": [{"appointmentDate": "10/14/2025"}],
        },
    ]


def _months(new: list[int], sessions: list[int]) -> list[MonthActivity]:
    return [
        MonthActivity(month=f"m{i}", new_patients=n, total_sessions=s)
        for i, (n, s) in enumerate(zip(new, sessions))
    ]


class TestMonths:
    """Tests for month arithmetic."""

    def test_month_start(self) -> None:
        """Test offsets across year boundaries."""
        assert month_start(date(2026, 1, 15), -1) == date(2025, 12, 1)
        assert month_start(date(2026, 12, 3), 1) == date(2027, 1, 1)
        assert month_start(TODAY) == date(2026, 3, 1)


class TestPatientActivity:
    """Tests for monthly patient activity."""

    def test_sessions_prefer_appointments(self) -> None:
        """Test that payments only count when no appointment falls in the month."""
        patient = {
            "appointments": [{"date": "2026-02-03"}],
            "payments": [{"dateOfService": "2026-02-04"}, {"dateOfTransaction": "2026-02-05"}],
        }
        assert sessions_in_month(patient, FEBRUARY) == 1
        assert sessions_in_month({"payments": patient["payments"]}, FEBRUARY) == 2
        assert sessions_in_month({}, FEBRUARY) == 0

    def test_month_activity(self, patients: list[dict]) -> None:
        """Test new, active and session counts with the clinic breakdown."""
        activity = month_activity(patients, FEBRUARY)

        assert activity.month == "2026-02"
        assert activity.new_patients == 1
        assert activity.active_patients == 2
        assert activity.total_sessions == 3
        assert activity.average_sessions_per_patient == 1.5
        assert activity.clinic_breakdown["North"].sessions == 2
        assert activity.clinic_breakdown["Unknown"].patients == 1

    def test_history_runs_oldest_first(self, patients: list[dict]) -> None:
        """Test that history covers the complete months plus the current one."""
        history = historical_patient_activity(patients, 6, TODAY)

        assert [m.month for m in history] == [
            "2025-09",
            "2025-10",
            "2025-11",
            "2025-12",
            "2026-01",
            "2026-02",
            "2026-03",
        ]
        assert history[1].total_sessions == 1
        assert history[4].new_patients == 1


class TestDemandTrends:
    """Tests for calculate_demand_trends."""

    def test_growth_between_windows(self) -> None:
        """Test percentage growth of the last three months over the three before."""
        trends = calculate_demand_trends(_months([2, 2, 2, 3, 3, 3], [10, 10, 10, 15, 15, 15]))

        assert trends.new_patients_growth == pytest.approx(50)
        assert trends.sessions_growth == pytest.approx(50)
        assert trends.confidence == "high"

    def test_short_history(self) -> None:
        """Test that under three months yields no growth at low confidence."""
        assert calculate_demand_trends(_months([5, 9], [5, 9])) == DemandTrends()

    def test_partial_previous_window(self) -> None:
        """Test that missing earlier months count as zero at medium confidence."""
        trends = calculate_demand_trends(_months([0, 0, 0, 0], [10, 20, 20, 20]))

        assert trends.sessions_growth == pytest.approx(500)
        assert trends.new_patients_growth == 0
        assert trends.confidence == "medium"


class TestDemandForecast:
    """Tests for generate_demand_forecast."""

    def test_compounds_growth(self) -> None:
        """Test month over month compounding, with damped active patient growth."""
        trends = DemandTrends(new_patients_growth=10, sessions_growth=50, confidence="high")
        baseline = MonthActivity(month="2026-02", new_patients=10, active_patients=20, total_sessions=100)

        forecast = generate_demand_forecast(trends, baseline, 2, TODAY)

        assert [f.month for f in forecast] == ["2026-04", "2026-05"]
        assert [f.forecasted_new_patients for f in forecast] == [11, 12]
        assert [f.forecasted_active_patients for f in forecast] == [22, 23]
        assert [f.forecasted_total_sessions for f in forecast] == [150, 225]
        assert {f.confidence for f in forecast} == {"high"}

    def test_crosses_year(self) -> None:
        """Test forecast months after December."""
        forecast = generate_demand_forecast(DemandTrends(), MonthActivity(month="x"), 2, date(2026, 11, 15))
        assert [f.month for f in forecast] == ["2026-12", "2027-01"]


class TestStaffingNeeds:
    """Tests for calculate_staffing_needs."""

    @staticmethod
    def _forecast(sessions: int) -> DemandForecast:
        return DemandForecast(
            month="2026-04",
            forecasted_new_patients=0,
            forecasted_active_patients=0,
            forecasted_total_sessions=sessions,
            confidence="high",
        )

    @pytest.mark.parametrize(
        ("sessions", "active", "required", "recommendation", "priority"),
        [
            (150, 1, 2, "Hire 1 additional provider(s)", "medium"),
            (500, 1, 5, "Hire 4 additional provider(s)", "high"),
            (150, 4, 2, "Current staffing is adequate", "low"),
            (0, 4, 0, "Consider reducing staff by 4 provider(s)", "low"),
        ],
    )
    def test_gap_and_recommendation(
        self,
        sessions: int,
        active: int,
        required: int,
        recommendation: str,
        priority: str,
    ) -> None:
        """Test required providers at 120 sessions and 85% utilization each."""
        providers = [{"status": "Active"}] * active + [{"status": "inactive"}]

        need = calculate_staffing_needs([self._forecast(sessions)], providers)[0]

        assert need.required_providers == required
        assert need.current_providers == active
        assert need.staffing_gap == required - active
        assert need.recommendation == recommendation
        assert need.priority == priority


class TestCredentialingExpirations:
    """Tests for check_credentialing_expirations."""

    def test_alerts_within_window(self) -> None:
        """Test alert selection, priority and ordering."""
        providers = [
            {"id": "A", "name": "Ana Lopez", "startDate": "2024-05-15"},
            {"id": "B", "name": "Ben Kim", "startDate": "2025-04-01"},
            {"id": "C", "name": "Carl Diaz", "startDate": "2025-04-25"},
            {"id": "D", "name": "Dee Park", "startDate": "2025-03-04"},
            {"id": "E", "name": "No Date"},
        ]

        alerts = check_credentialing_expirations(providers, TODAY)

        assert [(a.provider_id, a.alert_type) for a in alerts] == [
            ("B", "background_check"),
            ("C", "background_check"),
            ("A", "license_expiration"),
        ]
        assert [a.days_until_expiry for a in alerts] == [28, 52, 72]
        assert [a.priority for a in alerts] == ["high", "medium", "low"]
        assert alerts[0].expiry_date == date(2026, 4, 1)
        assert alerts[0].message == "Background check expires in 28 days"
        assert alerts[2].message == "PT License expires in 72 days"


class TestForecastReport:
    """Tests for build_forecast_report."""

    def test_report_from_records(self, patients: list[dict]) -> None:
        """Test that the forecast starts from the last complete month."""
        report = build_forecast_report(patients, [], months_ahead=2, today=TODAY)

        assert len(report.history) == 7
        assert report.trends.sessions_growth == pytest.approx(200)
        assert report.trends.confidence == "high"
        assert [f.forecasted_total_sessions for f in report.forecast] == [9, 27]
        assert [n.required_providers for n in report.staffing_needs] == [1, 1]
        assert report.staffing_needs[0].current_providers == 0
