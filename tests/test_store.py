import pytest

from app.config import Settings
from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.member import Member
from app.store.factory import create_store
from app.store.memory_store import MemoryStore
from app.store.sql_store import SqlDocumentStore


def member_data(tenant_id: str, email: str = "alex@example.com", **overrides) -> dict:
    data = {
        "tenant_id": tenant_id,
        "name": "Alex Runner",
        "email": email,
        "phone": "+15550100",
    }
    data.update(overrides)
    return data


class TestCreate:
    """Tests for creating records"""

    async def test_create_assigns_id_and_timestamps(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        assert isinstance(member, Member)
        assert member.id
        assert member.created_at is not None
        assert member.updated_at == member.created_at

    async def test_generated_ids_are_unique(self, any_store):
        ids = {
            (await any_store.create("members", member_data("gym_a", email=f"m{i}@example.com"))).id
            for i in range(20)
        }

        assert len(ids) == 20

    async def test_create_keeps_explicit_id(self, any_store):
        member = await any_store.create("members", member_data("gym_a", id="member_fixed"))

        assert member.id == "member_fixed"
        assert (await any_store.read("members", "member_fixed", "gym_a")).name == "Alex Runner"

    async def test_create_duplicate_id_conflicts(self, any_store):
        await any_store.create("members", member_data("gym_a", id="member_fixed"))

        with pytest.raises(ConflictException):
            await any_store.create("members", member_data("gym_a", id="member_fixed"))

    async def test_duplicate_id_missed_by_lookup_conflicts(self, any_store, monkeypatch):
        await any_store.create("members", member_data("gym_a", id="member_fixed"))

        async def missing(collection, record_id):
            return None

        monkeypatch.setattr(any_store, "_fetch", missing)

        with pytest.raises(ConflictException):
            await any_store.create("members", member_data("gym_a", email="other@example.com", id="member_fixed"))

    async def test_create_accepts_camel_case_keys(self, any_store):
        member = await any_store.create(
            "members",
            {"tenantId": "gym_a", "name": "Kim", "email": "kim@example.com", "phone": "1", "planId": "plan_x"},
        )

        assert member.tenant_id == "gym_a"
        assert member.plan_id == "plan_x"

    async def test_create_invalid_record(self, any_store):
        with pytest.raises(ValidationException):
            await any_store.create("plans", {"tenant_id": "gym_a", "name": "Broken", "price": -1, "duration": "monthly"})

    async def test_tenant_owned_record_requires_tenant(self, any_store):
        with pytest.raises(ValidationException):
            await any_store.create("members", {"name": "Nobody", "email": "n@example.com", "phone": "1"})

    async def test_unknown_collection(self, any_store):
        with pytest.raises(ValueError):
            await any_store.create("invoices", {"amount": 10})


class TestTenantIsolation:
    """Records of one tenant are invisible to another"""

    async def test_read_own_tenant(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        found = await any_store.read("members", member.id, "gym_a")

        assert found.id == member.id

    async def test_read_other_tenant_not_found(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        with pytest.raises(NotFoundException):
            await any_store.read("members", member.id, "gym_b")

    async def test_read_without_scope(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        assert (await any_store.read("members", member.id)).id == member.id

    async def test_update_other_tenant_not_found(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        with pytest.raises(NotFoundException):
            await any_store.update("members", member.id, {"name": "Hijacked"}, "gym_b")

        assert (await any_store.read("members", member.id, "gym_a")).name == "Alex Runner"

    async def test_delete_other_tenant_not_found(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        with pytest.raises(NotFoundException):
            await any_store.delete("members", member.id, "gym_b")

        assert await any_store.read("members", member.id, "gym_a")

    async def test_missing_and_foreign_look_the_same(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        with pytest.raises(NotFoundException) as foreign:
            await any_store.read("members", member.id, "gym_b")
        with pytest.raises(NotFoundException) as missing:
            await any_store.read("members", "member_missing", "gym_b")

        assert foreign.value.message == missing.value.message

    async def test_query_scoped_to_tenant(self, any_store):
        await any_store.create("members", member_data("gym_a", email="a1@example.com"))
        await any_store.create("members", member_data("gym_a", email="a2@example.com"))
        await any_store.create("members", member_data("gym_b", email="b1@example.com"))

        assert len(await any_store.query("members", tenant_id="gym_a")) == 2
        assert len(await any_store.query("members", tenant_id="gym_b")) == 1
        assert len(await any_store.query("members")) == 3

    async def test_records_without_tenant_visible_everywhere(self, any_store):
        tenant = await any_store.create("tenants", {"id": "gym_a", "name": "Gym A", "owner": "o@example.com"})

        assert (await any_store.read("tenants", tenant.id, "gym_b")).id == "gym_a"


class TestUpdate:
    """Tests for updating records"""

    async def test_update_merges_changes(self, any_store):
        member = await any_store.create("members", member_data("gym_a", notes="first visit"))

        updated = await any_store.update("members", member.id, {"phone": "+15550199"}, "gym_a")

        assert updated.phone == "+15550199"
        assert updated.notes == "first visit"
        assert updated.updated_at >= member.updated_at

    async def test_update_never_changes_protected_fields(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        updated = await any_store.update(
            "members",
            member.id,
            {
                "id": "member_other",
                "tenant_id": "gym_b",
                "tenantId": "gym_b",
                "createdAt": "2000-01-01T00:00:00Z",
                "name": "Renamed",
            },
            "gym_a",
        )

        assert updated.id == member.id
        assert updated.tenant_id == "gym_a"
        assert updated.created_at == member.created_at
        assert updated.name == "Renamed"

        stored = await any_store.read("members", member.id, "gym_a")
        assert stored.tenant_id == "gym_a"
        with pytest.raises(NotFoundException):
            await any_store.read("members", "member_other")

    async def test_update_missing(self, any_store):
        with pytest.raises(NotFoundException):
            await any_store.update("members", "member_missing", {"name": "X"}, "gym_a")

    async def test_update_invalid_value(self, any_store):
        plan = await any_store.create(
            "plans", {"tenant_id": "gym_a", "name": "Basic", "price": 10, "duration": "monthly"}
        )

        with pytest.raises(ValidationException):
            await any_store.update("plans", plan.id, {"price": -5}, "gym_a")


class TestDeleteAndQuery:
    """Tests for deleting and filtering"""

    async def test_delete_returns_id(self, any_store):
        member = await any_store.create("members", member_data("gym_a"))

        assert await any_store.delete("members", member.id, "gym_a") == member.id
        with pytest.raises(NotFoundException):
            await any_store.read("members", member.id, "gym_a")

    async def test_query_filters_are_anded(self, any_store):
        await any_store.create("members", member_data("gym_a", email="a@example.com", status="active", plan_id="p1"))
        await any_store.create("members", member_data("gym_a", email="b@example.com", status="inactive", plan_id="p1"))
        await any_store.create("members", member_data("gym_a", email="c@example.com", status="active", plan_id="p2"))

        found = await any_store.query("members", {"status": "active", "planId": "p1"}, "gym_a")

        assert [member.email for member in found] == ["a@example.com"]

    async def test_query_empty_collection(self, any_store):
        assert await any_store.query("trainers", tenant_id="gym_a") == []


class TestLifecycle:
    """Backend selection and health"""

    async def test_health_check(self, any_store):
        health = await any_store.health_check()

        assert health["status"] == "healthy"
        assert health["database"] == any_store.backend_name

    async def test_memory_health_reports_counts(self, store):
        await store.create("members", member_data("gym_a"))

        health = await store.health_check()

        assert health["collections"]["members"] == 1

    async def test_memory_store_returns_copies(self, store):
        member = await store.create("members", member_data("gym_a"))
        member.name = "Mutated"

        assert (await store.read("members", member.id)).name == "Alex Runner"

    async def test_sql_store_not_started(self):
        unstarted = SqlDocumentStore("sqlite+aiosqlite:///:memory:")

        health = await unstarted.health_check()

        assert health["status"] == "unhealthy"

    def test_create_store_selects_backend(self):
        assert isinstance(create_store(Settings(STORE_BACKEND="memory")), MemoryStore)
        assert isinstance(
            create_store(Settings(STORE_BACKEND="sql", DATABASE_URL="sqlite+aiosqlite:///:memory:")),
            SqlDocumentStore,
        )

    def test_create_store_unknown_backend(self):
        with pytest.raises(ValueError):
            create_store(Settings(STORE_BACKEND="mongo"))
