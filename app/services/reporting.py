"""
Aggregations behind the dashboard, analytics, reports and stats endpoints.

Every function here is pure: it takes lists of records (and ``now`` where
time matters) and returns JSON-ready dicts with camelCase keys.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable

from app.models.member import Member, MemberStatus
from app.models.plan import Plan
from app.models.tenant import Tenant, TenantPlan
from app.models.trainer import Trainer
from app.models.user import User

ANALYTICS_PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
DEFAULT_PERIOD = "30d"
REPORT_TYPES = ("summary", "members", "revenue", "trainers")
NO_PLAN = "No Plan"


def _round2(value: float) -> float:
    return round(value, 2)


def _average(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _plans_by_id(plans: Iterable[Plan]) -> dict[str, Plan]:
    return {plan.id: plan for plan in plans}


def _plan_name(member: Member, plans_by_id: dict[str, Plan]) -> str:
    plan = plans_by_id.get(member.plan_id) if member.plan_id else None
    return plan.name if plan else NO_PLAN


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _one_year_before(now: datetime) -> datetime:
    try:
        return now.replace(year=now.year - 1)
    except ValueError:
        # Feb 29
        return now.replace(year=now.year - 1, day=28)


def status_breakdown(members: list[Member]) -> dict[str, int]:
    counts = Counter(member.status for member in members)
    return {status.value: counts.get(status, 0) for status in MemberStatus}


def active_revenue(members: list[Member], plans: list[Plan]) -> float:
    """Sum of plan prices over active members; unresolved plan ids contribute 0."""
    plans_by_id = _plans_by_id(plans)
    total = 0.0
    for member in members:
        if member.status != MemberStatus.ACTIVE or not member.plan_id:
            continue
        plan = plans_by_id.get(member.plan_id)
        if plan is not None:
            total += plan.price
    return _round2(total)


def new_since(records: Iterable, since: datetime) -> int:
    return sum(1 for record in records if record.created_at > since)


def plan_distribution(members: list[Member], plans: list[Plan]) -> list[dict]:
    """Member count, revenue and share of members for each plan."""
    total = len(members)
    member_counts = Counter(member.plan_id for member in members)
    distribution = []
    for plan in plans:
        count = member_counts.get(plan.id, 0)
        distribution.append(
            {
                "id": plan.id,
                "name": plan.name,
                "memberCount": count,
                "revenue": _round2(count * plan.price),
                "percentage": round(count / total * 100) if total else 0,
            }
        )
    return distribution


def top_plans(distribution: list[dict], limit: int = 5) -> list[dict]:
    return sorted(distribution, key=lambda entry: entry["memberCount"], reverse=True)[:limit]


def recent_members(members: list[Member], plans: list[Plan], limit: int = 10) -> list[dict]:
    plans_by_id = _plans_by_id(plans)
    newest = sorted(members, key=lambda member: member.created_at, reverse=True)[:limit]
    return [
        {
            "id": member.id,
            "name": member.name,
            "email": member.email,
            "joinDate": member.join_date.isoformat(),
            "status": member.status.value,
            "planName": _plan_name(member, plans_by_id),
        }
        for member in newest
    ]


def monthly_trends(
    members: list[Member], plans: list[Plan], now: datetime, months: int = 6
) -> list[dict]:
    """
    New members and their plan revenue per calendar month.

    Covers the current month and the ``months - 1`` before it, oldest first.
    """
    plans_by_id = _plans_by_id(plans)
    trends = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        start = now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)
        end_year, end_month = _shift_month(year, month, 1)
        end = start.replace(year=end_year, month=end_month)

        joined = [member for member in members if start <= member.created_at < end]
        revenue = sum(
            plans_by_id[member.plan_id].price
            for member in joined
            if member.plan_id in plans_by_id
        )
        trends.append(
            {
                "month": start.strftime("%b %Y"),
                "newMembers": len(joined),
                "revenue": _round2(revenue),
            }
        )
    return trends


def build_dashboard(
    members: list[Member], plans: list[Plan], trainers: list[Trainer], now: datetime
) -> dict:
    distribution = plan_distribution(members, plans)
    return {
        "overview": {
            "totalMembers": len(members),
            "activeMembers": sum(1 for m in members if m.status == MemberStatus.ACTIVE),
            "totalPlans": len(plans),
            "activePlans": sum(1 for p in plans if p.is_active),
            "totalTrainers": len(trainers),
            "activeTrainers": sum(1 for t in trainers if t.is_active),
            "monthlyRevenue": active_revenue(members, plans),
            "newMembersLast30Days": new_since(members, now - timedelta(days=30)),
        },
        "planDistribution": distribution,
        "recentMembers": recent_members(members, plans),
        "statusBreakdown": status_breakdown(members),
        "monthlyTrends": monthly_trends(members, plans, now),
        "topPlans": top_plans(distribution),
    }


def period_start(period: str, now: datetime) -> datetime:
    """Start of an analytics window; unknown periods fall back to 30 days."""
    if period == "1y":
        return _one_year_before(now)
    return now - ANALYTICS_PERIODS.get(period, ANALYTICS_PERIODS[DEFAULT_PERIOD])


def _active_revenue_by_plan(members: list[Member], plans: list[Plan]) -> list[dict]:
    active_counts = Counter(m.plan_id for m in members if m.status == MemberStatus.ACTIVE)
    return [
        {
            "planName": plan.name,
            "price": plan.price,
            "memberCount": active_counts.get(plan.id, 0),
            "revenue": _round2(active_counts.get(plan.id, 0) * plan.price),
        }
        for plan in plans
    ]


def build_analytics(members: list[Member], plans: list[Plan], period: str, now: datetime) -> dict:
    """
    Registration and revenue metrics over a trailing window.

    Retention is the share of all members currently active; ARPU divides
    active revenue by the total member count.
    """
    start = period_start(period, now)
    in_window = [member for member in members if member.created_at >= start]

    daily: Counter = Counter(member.created_at.date().isoformat() for member in in_window)
    revenue_by_plan = [
        {key: entry[key] for key in ("planName", "revenue", "memberCount")}
        for entry in _active_revenue_by_plan(members, plans)
    ]
    total_revenue = _round2(sum(entry["revenue"] for entry in revenue_by_plan))
    active = sum(1 for m in members if m.status == MemberStatus.ACTIVE)
    retention = active / len(members) * 100 if members else 0.0
    arpu = total_revenue / len(members) if members else 0.0

    return {
        "period": period if period in ANALYTICS_PERIODS or period == "1y" else DEFAULT_PERIOD,
        "dateRange": {"start": start.isoformat(), "end": now.isoformat()},
        "metrics": {
            "newMembers": len(in_window),
            "totalRevenue": total_revenue,
            "retentionRate": _round2(retention),
            "arpu": _round2(arpu),
        },
        "dailyRegistrations": dict(sorted(daily.items())),
        "revenueByPlan": revenue_by_plan,
        "trends": {
            "memberGrowth": len(in_window),
            "revenueGrowth": total_revenue,
        },
    }


def build_report(
    report_type: str,
    members: list[Member],
    plans: list[Plan],
    trainers: list[Trainer],
    now: datetime,
) -> dict:
    """Report document for one of REPORT_TYPES; anything else yields the summary."""
    generated_at = now.isoformat()
    plans_by_id = _plans_by_id(plans)
    statuses = status_breakdown(members)

    if report_type == "members":
        return {
            "title": "Members Report",
            "generatedAt": generated_at,
            "summary": {
                "totalMembers": len(members),
                "activeMembers": statuses[MemberStatus.ACTIVE.value],
                "inactiveMembers": statuses[MemberStatus.INACTIVE.value],
            },
            "details": [
                {
                    "name": member.name,
                    "email": member.email,
                    "phone": member.phone,
                    "status": member.status.value,
                    "joinDate": member.join_date.isoformat(),
                    "planName": _plan_name(member, plans_by_id),
                }
                for member in members
            ],
        }

    if report_type == "revenue":
        details = [
            {
                "planName": entry["planName"],
                "price": entry["price"],
                "memberCount": entry["memberCount"],
                "totalRevenue": entry["revenue"],
            }
            for entry in _active_revenue_by_plan(members, plans)
        ]
        total = _round2(sum(entry["totalRevenue"] for entry in details))
        return {
            "title": "Revenue Report",
            "generatedAt": generated_at,
            "summary": {
                "totalRevenue": total,
                "totalPlans": len(plans),
                "averageRevenuePerPlan": _round2(total / len(details)) if details else 0.0,
            },
            "details": details,
        }

    if report_type == "trainers":
        return {
            "title": "Trainers Report",
            "generatedAt": generated_at,
            "summary": {
                "totalTrainers": len(trainers),
                "activeTrainers": sum(1 for t in trainers if t.is_active),
                "averageRating": _round2(_average([t.rating for t in trainers])),
            },
            "details": [
                {
                    "name": trainer.name,
                    "email": trainer.email,
                    "specialization": trainer.specialization,
                    "experience": trainer.experience,
                    "hourlyRate": trainer.hourly_rate,
                    "rating": trainer.rating,
                    "totalSessions": trainer.total_sessions,
                    "isActive": trainer.is_active,
                }
                for trainer in trainers
            ],
        }

    member_counts = Counter(member.plan_id for member in members)
    return {
        "title": "Summary Report",
        "generatedAt": generated_at,
        "overview": {
            "totalMembers": len(members),
            "activeMembers": statuses[MemberStatus.ACTIVE.value],
            "totalPlans": len(plans),
            "totalTrainers": len(trainers),
            "totalRevenue": active_revenue(members, plans),
        },
        "breakdown": {
            "membersByStatus": statuses,
            "planPopularity": [
                {"name": plan.name, "memberCount": member_counts.get(plan.id, 0)}
                for plan in plans
            ],
        },
    }


def plan_stats(plans: list[Plan], members: list[Member]) -> dict:
    member_counts = Counter(member.plan_id for member in members)
    per_plan = [
        {
            "id": plan.id,
            "name": plan.name,
            "price": plan.price,
            "duration": plan.duration.value,
            "memberCount": member_counts.get(plan.id, 0),
            "totalRevenue": _round2(member_counts.get(plan.id, 0) * plan.price),
            "isActive": plan.is_active,
        }
        for plan in plans
    ]
    return {
        "plans": per_plan,
        "summary": {
            "totalPlans": len(plans),
            "activePlans": sum(1 for p in plans if p.is_active),
            "totalMembers": len(members),
            "totalRevenue": _round2(sum(entry["totalRevenue"] for entry in per_plan)),
            "averagePrice": _round2(_average([p.price for p in plans])),
        },
    }


def trainer_stats(trainers: list[Trainer]) -> dict:
    specializations = Counter(trainer.specialization or "General" for trainer in trainers)
    top = sorted(
        (trainer for trainer in trainers if trainer.is_active),
        key=lambda trainer: trainer.rating,
        reverse=True,
    )[:5]
    return {
        "summary": {
            "totalTrainers": len(trainers),
            "activeTrainers": sum(1 for t in trainers if t.is_active),
            "averageRating": _round2(_average([t.rating for t in trainers])),
            "totalSessions": sum(t.total_sessions for t in trainers),
            "averageHourlyRate": _round2(_average([t.hourly_rate for t in trainers])),
        },
        "specializationBreakdown": dict(specializations),
        "topTrainers": [
            {
                "id": trainer.id,
                "name": trainer.name,
                "specialization": trainer.specialization,
                "rating": trainer.rating,
                "totalSessions": trainer.total_sessions,
            }
            for trainer in top
        ],
    }


def platform_analytics(
    tenants: list[Tenant], users: list[User], members: list[Member], now: datetime
) -> dict:
    """Cross-tenant overview for super admins."""
    since = now - timedelta(days=30)
    tiers = Counter(tenant.plan for tenant in tenants)
    members_per_tenant = Counter(member.tenant_id for member in members)

    ranked = sorted(
        (
            {
                "id": tenant.id,
                "name": tenant.name,
                "plan": tenant.plan.value,
                "memberCount": members_per_tenant.get(tenant.id, 0),
                "createdAt": tenant.created_at.isoformat(),
            }
            for tenant in tenants
        ),
        key=lambda entry: entry["memberCount"],
        reverse=True,
    )

    return {
        "overview": {
            "totalTenants": len(tenants),
            "activeTenants": sum(1 for t in tenants if t.is_active),
            "totalUsers": len(users),
            "totalMembers": len(members),
            "newTenantsLast30Days": new_since(tenants, since),
            "newUsersLast30Days": new_since(users, since),
        },
        "tenantsByPlan": {tier.value: tiers.get(tier, 0) for tier in TenantPlan},
        "topTenants": ranked[:10],
    }
