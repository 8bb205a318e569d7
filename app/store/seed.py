"""Demo data for local development (SEED_SAMPLE_DATA=true)."""

import logging

from starlette.concurrency import run_in_threadpool

from app.core.security import hash_password
from app.models.tenant import TenantPlan, TenantSettings
from app.store.base import TenantScopedStore

logger = logging.getLogger(__name__)

DEMO_OWNER_EMAIL = "demo@gymflow.com"
DEMO_OWNER_PASSWORD = "demo123"
DEMO_ADMIN_EMAIL = "admin@gymflow.com"
DEMO_ADMIN_PASSWORD = "admin123"


async def seed_sample_data(store: TenantScopedStore) -> bool:
    """
    Populate an empty store with two gyms, a demo owner and a super admin.

    Returns:
        True if data was seeded, False if the store already had tenants
    """
    if await store.query("tenants"):
        return False

    for tenant in (
        {
            "id": "fitnesshub",
            "name": "Fitness Hub",
            "owner": DEMO_OWNER_EMAIL,
            "plan": TenantPlan.PREMIUM,
            "settings": TenantSettings.for_plan(TenantPlan.PREMIUM).model_dump(),
        },
        {
            "id": "powerhouse",
            "name": "PowerHouse Gym",
            "owner": "owner@powerhouse.com",
            "plan": TenantPlan.BASIC,
            "settings": TenantSettings.for_plan(TenantPlan.BASIC).model_dump(),
        },
    ):
        await store.create("tenants", tenant)

    owner_hash = await run_in_threadpool(hash_password, DEMO_OWNER_PASSWORD)
    admin_hash = await run_in_threadpool(hash_password, DEMO_ADMIN_PASSWORD)
    await store.create(
        "users",
        {
            "id": "user_demo",
            "email": DEMO_OWNER_EMAIL,
            "password_hash": owner_hash,
            "first_name": "Demo",
            "last_name": "User",
            "role": "gym_owner",
            "tenant_id": "fitnesshub",
            "gym_name": "Fitness Hub",
        },
    )
    await store.create(
        "users",
        {
            "id": "user_admin",
            "email": DEMO_ADMIN_EMAIL,
            "password_hash": admin_hash,
            "first_name": "Super",
            "last_name": "Admin",
            "role": "super_admin",
            "tenant_id": None,
        },
    )

    for plan in (
        {
            "id": "plan_basic",
            "name": "Basic Plan",
            "price": 29.99,
            "duration": "monthly",
            "features": ["Gym Access", "Basic Equipment"],
        },
        {
            "id": "plan_premium",
            "name": "Premium Plan",
            "price": 49.99,
            "duration": "monthly",
            "features": ["Gym Access", "All Equipment", "Personal Training", "Nutrition Consultation"],
        },
    ):
        await store.create("plans", {**plan, "tenant_id": "fitnesshub"})

    for member in (
        {
            "id": "member_1",
            "name": "John Doe",
            "email": "john@example.com",
            "phone": "+1234567890",
            "plan_id": "plan_premium",
            "join_date": "2024-01-15",
        },
        {
            "id": "member_2",
            "name": "Jane Smith",
            "email": "jane@example.com",
            "phone": "+1234567891",
            "plan_id": "plan_basic",
            "join_date": "2024-02-01",
        },
    ):
        await store.create("members", {**member, "tenant_id": "fitnesshub"})

    for trainer in (
        {
            "id": "trainer_1",
            "name": "Mike Johnson",
            "email": "mike@fitnesshub.com",
            "phone": "+1234567892",
            "specialization": "Weight Training",
            "experience": "5 years",
            "hourly_rate": 50,
        },
        {
            "id": "trainer_2",
            "name": "Sarah Wilson",
            "email": "sarah@fitnesshub.com",
            "phone": "+1234567893",
            "specialization": "Yoga & Pilates",
            "experience": "3 years",
            "hourly_rate": 40,
        },
    ):
        await store.create("trainers", {**trainer, "tenant_id": "fitnesshub"})

    logger.info("Seeded sample data")
    return True
