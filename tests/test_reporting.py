from datetime import date, datetime, timedelta, timezone

import pytest

from app.models.member import Member
from app.models.plan import Plan
from app.models.tenant import Tenant
from app.models.trainer import Trainer
from app.models.user import User
from app.services import reporting

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_plan(plan_id: str, price: float, name: str | None = None, **fields) -> Plan:
    return Plan(
        id=plan_id,
        tenant_id="gym_a",
        created_at=NOW,
        updated_at=NOW,
        name=name or plan_id,
        price=price,
        duration=fields.pop("duration", "monthly"),
        **fields,
    )


def make_member(member_id: str, plan_id: str | None = None, status: str = "active", days_ago: int = 0) -> Member:
    created = NOW - timedelta(days=days_ago)
    return Member(
        id=member_id,
        tenant_id="gym_a",
        created_at=created,
        updated_at=created,
        name=member_id.title(),
        email=f"{member_id}@example.com",
        phone="1",
        plan_id=plan_id,
        status=status,
        join_date=date(2024, 1, 1),
    )


def make_trainer(trainer_id: str, rating: float, rate: float, specialization: str = "Yoga", active: bool = True) -> Trainer:
    return Trainer(
        id=trainer_id,
        tenant_id="gym_a",
        created_at=NOW,
        updated_at=NOW,
        name=trainer_id.title(),
        email=f"{trainer_id}@example.com",
        phone="1",
        specialization=specialization,
        hourly_rate=rate,
        rating=rating,
        is_active=active,
    )


@pytest.fixture
def plans():
    return [make_plan("basic", 30), make_plan("premium", 50)]


@pytest.fixture
def members():
    return [
        make_member("ann", "basic", days_ago=2),
        make_member("ben", "premium", days_ago=10),
        make_member("cat", "premium", status="inactive", days_ago=45),
        make_member("dan", "plan_deleted", days_ago=70),
        make_member("eve", None, days_ago=200),
    ]


class TestRevenue:
    """Revenue from active members' plans"""

    def test_active_revenue(self, members, plans):
        assert reporting.active_revenue(members, plans) == 80

    def test_unknown_plan_contributes_zero(self, plans):
        assert reporting.active_revenue([make_member("x", "plan_gone")], plans) == 0

    def test_no_members(self, plans):
        assert reporting.active_revenue([], plans) == 0


class TestBreakdowns:
    def test_status_breakdown(self, members):
        assert reporting.status_breakdown(members) == {
            "active": 4,
            "inactive": 1,
            "suspended": 0,
            "expired": 0,
        }

    def test_plan_distribution(self, members, plans):
        distribution = {entry["id"]: entry for entry in reporting.plan_distribution(members, plans)}

        assert distribution["basic"]["memberCount"] == 1
        assert distribution["basic"]["percentage"] == 20
        assert distribution["premium"]["memberCount"] == 2
        assert distribution["premium"]["revenue"] == 100
        assert distribution["premium"]["percentage"] == 40

    def test_plan_distribution_without_members(self, plans):
        assert all(entry["percentage"] == 0 for entry in reporting.plan_distribution([], plans))

    def test_new_since(self, members):
        assert reporting.new_since(members, NOW - timedelta(days=30)) == 2

    def test_recent_members_newest_first(self, members, plans):
        recent = reporting.recent_members(members, plans, limit=3)

        assert [entry["id"] for entry in recent] == ["ann", "ben", "cat"]
        assert recent[0]["planName"] == "basic"

    def test_recent_members_unknown_plan(self, members, plans):
        recent = {entry["id"]: entry for entry in reporting.recent_members(members, plans)}

        assert recent["dan"]["planName"] == "No Plan"
        assert recent["eve"]["planName"] == "No Plan"


class TestMonthlyTrends:
    def test_six_months_oldest_first(self, members, plans):
        trends = reporting.monthly_trends(members, plans, NOW)

        assert [entry["month"] for entry in trends] == [
            "Jan 2024",
            "Feb 2024",
            "Mar 2024",
            "Apr 2024",
            "May 2024",
            "Jun 2024",
        ]

    def test_counts_and_revenue(self, members, plans):
        trends = {entry["month"]: entry for entry in reporting.monthly_trends(members, plans, NOW)}

        # ann (Jun 13) and ben (Jun 5)
        assert trends["Jun 2024"]["newMembers"] == 2
        assert trends["Jun 2024"]["revenue"] == 80
        # cat (May 1) on premium, dan (Apr 6) on a deleted plan
        assert trends["May 2024"]["revenue"] == 50
        assert trends["Apr 2024"]["newMembers"] == 1
        assert trends["Apr 2024"]["revenue"] == 0

    def test_crosses_year_boundary(self):
        trends = reporting.monthly_trends([], [], datetime(2024, 2, 10, tzinfo=timezone.utc))

        assert trends[0]["month"] == "Sep 2023"
        assert trends[-1]["month"] == "Feb 2024"


class TestDashboard:
    def test_overview(self, members, plans):
        trainers = [make_trainer("tom", 4.0, 40), make_trainer("tia", 3.0, 30, active=False)]

        dashboard = reporting.build_dashboard(members, plans, trainers, NOW)

        assert dashboard["overview"] == {
            "totalMembers": 5,
            "activeMembers": 4,
            "totalPlans": 2,
            "activePlans": 2,
            "totalTrainers": 2,
            "activeTrainers": 1,
            "monthlyRevenue": 80,
            "newMembersLast30Days": 2,
        }
        assert dashboard["topPlans"][0]["id"] == "premium"
        assert len(dashboard["monthlyTrends"]) == 6


class TestAnalytics:
    @pytest.mark.parametrize(
        "period,days",
        [("7d", 7), ("30d", 30), ("90d", 90), ("bogus", 30)],
    )
    def test_period_start(self, period, days):
        assert reporting.period_start(period, NOW) == NOW - timedelta(days=days)

    def test_one_year(self):
        assert reporting.period_start("1y", NOW) == datetime(2023, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_one_year_from_leap_day(self):
        leap = datetime(2024, 2, 29, tzinfo=timezone.utc)

        assert reporting.period_start("1y", leap) == datetime(2023, 2, 28, tzinfo=timezone.utc)

    def test_metrics(self, members, plans):
        analytics = reporting.build_analytics(members, plans, "90d", NOW)

        assert analytics["period"] == "90d"
        assert analytics["metrics"]["newMembers"] == 4
        assert analytics["metrics"]["totalRevenue"] == 80
        assert analytics["metrics"]["retentionRate"] == 80
        assert analytics["metrics"]["arpu"] == 16
        assert sum(analytics["dailyRegistrations"].values()) == 4

    def test_unknown_period_reported_as_default(self, members, plans):
        assert reporting.build_analytics(members, plans, "5y", NOW)["period"] == "30d"


class TestReports:
    @pytest.mark.parametrize(
        "report_type,title",
        [
            ("summary", "Summary Report"),
            ("members", "Members Report"),
            ("revenue", "Revenue Report"),
            ("trainers", "Trainers Report"),
            ("unknown", "Summary Report"),
        ],
    )
    def test_titles(self, members, plans, report_type, title):
        assert reporting.build_report(report_type, members, plans, [], NOW)["title"] == title

    def test_revenue_report(self, members, plans):
        report = reporting.build_report("revenue", members, plans, [], NOW)

        assert report["summary"]["totalRevenue"] == 80
        assert report["summary"]["averageRevenuePerPlan"] == 40

    def test_members_report_details(self, members, plans):
        report = reporting.build_report("members", members, plans, [], NOW)

        assert report["summary"]["inactiveMembers"] == 1
        assert len(report["details"]) == 5


class TestStats:
    def test_plan_stats(self, members, plans):
        stats = reporting.plan_stats(plans, members)

        assert stats["summary"]["totalRevenue"] == 130
        assert stats["summary"]["averagePrice"] == 40

    def test_trainer_stats_top_excludes_inactive(self):
        trainers = [
            make_trainer("tom", 4.0, 40),
            make_trainer("tia", 5.0, 30, active=False),
            make_trainer("ted", 4.5, 50, specialization=""),
        ]

        stats = reporting.trainer_stats(trainers)

        assert [entry["id"] for entry in stats["topTrainers"]] == ["ted", "tom"]
        assert stats["specializationBreakdown"] == {"Yoga": 2, "General": 1}
        assert stats["summary"]["averageHourlyRate"] == 40

    def test_trainer_stats_empty(self):
        assert reporting.trainer_stats([])["summary"]["averageRating"] == 0


class TestPlatformAnalytics:
    def test_platform_overview(self, members):
        tenants = [
            Tenant(id="gym_a", created_at=NOW, updated_at=NOW, name="A", owner="a@example.com", plan="premium"),
            Tenant(
                id="gym_b",
                created_at=NOW - timedelta(days=100),
                updated_at=NOW,
                name="B",
                owner="b@example.com",
                is_active=False,
            ),
        ]
        users = [
            User(
                id="user_a",
                tenant_id="gym_a",
                created_at=NOW,
                updated_at=NOW,
                email="a@example.com",
                password_hash="x",
                first_name="A",
                last_name="A",
            )
        ]

        analytics = reporting.platform_analytics(tenants, users, members, NOW)

        assert analytics["overview"]["totalTenants"] == 2
        assert analytics["overview"]["activeTenants"] == 1
        assert analytics["overview"]["newTenantsLast30Days"] == 1
        assert analytics["tenantsByPlan"] == {"basic": 1, "premium": 1, "enterprise": 0}
        assert analytics["topTenants"][0] == {
            "id": "gym_a",
            "name": "A",
            "plan": "premium",
            "memberCount": 5,
            "createdAt": NOW.isoformat(),
        }
