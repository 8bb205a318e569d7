from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.core.security import validate_email
from app.models.member import Member, MemberStatus
from app.schemas.member_schemas import MemberCreate, MemberUpdate
from app.store.base import TenantScopedStore, generate_id

COLLECTION = "members"


class MemberService:
    """Service for member business logic"""

    def __init__(self, store: TenantScopedStore):
        self.store = store

    async def list_members(self, tenant_id: str) -> list[Member]:
        """All members of the tenant, newest first"""
        members = await self.store.query(COLLECTION, tenant_id=tenant_id)
        return sorted(members, key=lambda member: member.created_at, reverse=True)

    async def get_member(self, member_id: str, tenant_id: str) -> Member:
        """
        Get a member of the tenant.

        Raises:
            NotFoundException: If member not found or belongs to another tenant
        """
        try:
            return await self.store.read(COLLECTION, member_id, tenant_id)
        except NotFoundException as e:
            raise NotFoundException("Member not found", code="MEMBER_NOT_FOUND") from e

    async def _ensure_plan(self, plan_id: str | None, tenant_id: str) -> None:
        if not plan_id:
            return
        try:
            await self.store.read("plans", plan_id, tenant_id)
        except NotFoundException as e:
            raise ValidationException("Invalid plan ID", code="INVALID_PLAN") from e

    async def _email_taken(self, email: str, tenant_id: str) -> bool:
        return bool(await self.store.query(COLLECTION, {"email": email}, tenant_id))

    async def create_member(self, data: MemberCreate, tenant_id: str) -> Member:
        """
        Enroll a member in the tenant.

        Raises:
            ValidationException: Bad email format, or INVALID_PLAN
            ConflictException: MEMBER_EXISTS if the email is already enrolled
        """
        email = data.email.strip().lower()
        if not validate_email(email):
            raise ValidationException("Invalid email format")

        if await self._email_taken(email, tenant_id):
            raise ConflictException("Member with this email already exists", code="MEMBER_EXISTS")

        await self._ensure_plan(data.plan_id, tenant_id)

        record = data.model_dump(exclude_none=True)
        record.update(
            {
                "id": f"member_{generate_id()}",
                "tenant_id": tenant_id,
                "name": data.name.strip(),
                "email": email,
                "phone": data.phone.strip(),
            }
        )
        return await self.store.create(COLLECTION, record)

    async def update_member(self, member_id: str, data: MemberUpdate, tenant_id: str) -> Member:
        """
        Apply a partial update.

        Raises:
            NotFoundException: If member not found in the tenant
            ValidationException: Bad email format, or INVALID_PLAN
            ConflictException: EMAIL_EXISTS if another member already uses the email
        """
        member = await self.get_member(member_id, tenant_id)
        changes = data.changes(nullable=("plan_id", "emergency_contact"))

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            if not validate_email(changes["email"]):
                raise ValidationException("Invalid email format")
            if changes["email"] != member.email and await self._email_taken(changes["email"], tenant_id):
                raise ConflictException("Email already in use by another member", code="EMAIL_EXISTS")

        if changes.get("plan_id"):
            await self._ensure_plan(changes["plan_id"], tenant_id)

        return await self.store.update(COLLECTION, member_id, changes, tenant_id)

    async def delete_member(self, member_id: str, tenant_id: str) -> Member:
        """Remove a member and return the deleted record"""
        member = await self.get_member(member_id, tenant_id)
        await self.store.delete(COLLECTION, member_id, tenant_id)
        return member

    async def search_members(
        self,
        tenant_id: str,
        query: str | None = None,
        status: MemberStatus | None = None,
        plan_id: str | None = None,
    ) -> list[Member]:
        """
        Filter members by status and plan, then by a case-insensitive term
        matched against name, email and phone.

        Members whose name equals the term come first.
        """
        filters = {}
        if status is not None:
            filters["status"] = status
        if plan_id:
            filters["plan_id"] = plan_id

        members = await self.store.query(COLLECTION, filters, tenant_id)
        members.sort(key=lambda member: member.created_at, reverse=True)

        term = (query or "").strip().lower()
        if not term:
            return members

        hits = [
            member
            for member in members
            if term in member.name.lower() or term in member.email.lower() or term in member.phone.lower()
        ]
        # stable: exact matches first, otherwise newest first
        return sorted(hits, key=lambda member: member.name.lower() != term)
