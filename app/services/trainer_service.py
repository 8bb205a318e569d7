from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.core.security import validate_email
from app.models.trainer import Trainer
from app.schemas.trainer_schemas import TrainerCreate, TrainerUpdate
from app.services import reporting
from app.store.base import TenantScopedStore, generate_id

COLLECTION = "trainers"


class TrainerService:
    """Service for trainer business logic"""

    def __init__(self, store: TenantScopedStore):
        self.store = store

    async def list_trainers(self, tenant_id: str) -> list[Trainer]:
        """All trainers of the tenant, newest first"""
        trainers = await self.store.query(COLLECTION, tenant_id=tenant_id)
        return sorted(trainers, key=lambda trainer: trainer.created_at, reverse=True)

    async def get_trainer(self, trainer_id: str, tenant_id: str) -> Trainer:
        """
        Get a trainer of the tenant.

        Raises:
            NotFoundException: If trainer not found or belongs to another tenant
        """
        try:
            return await self.store.read(COLLECTION, trainer_id, tenant_id)
        except NotFoundException as e:
            raise NotFoundException("Trainer not found", code="TRAINER_NOT_FOUND") from e

    async def _email_taken(self, email: str, tenant_id: str) -> bool:
        return bool(await self.store.query(COLLECTION, {"email": email}, tenant_id))

    async def create_trainer(self, data: TrainerCreate, tenant_id: str) -> Trainer:
        """
        Add a trainer with no sessions and no rating yet.

        Raises:
            ValidationException: Bad email format
            ConflictException: TRAINER_EXISTS if the email is already registered
        """
        email = data.email.strip().lower()
        if not validate_email(email):
            raise ValidationException("Invalid email format")

        if await self._email_taken(email, tenant_id):
            raise ConflictException("Trainer with this email already exists", code="TRAINER_EXISTS")

        record = data.model_dump()
        record.update(
            {
                "id": f"trainer_{generate_id()}",
                "tenant_id": tenant_id,
                "name": data.name.strip(),
                "email": email,
                "phone": data.phone.strip(),
                "specialization": data.specialization.strip(),
                "rating": 0.0,
                "total_sessions": 0,
            }
        )
        return await self.store.create(COLLECTION, record)

    async def update_trainer(self, trainer_id: str, data: TrainerUpdate, tenant_id: str) -> Trainer:
        """
        Apply a partial update.

        Raises:
            NotFoundException: If trainer not found in the tenant
            ValidationException: Bad email format
            ConflictException: EMAIL_EXISTS if another trainer already uses the email
        """
        trainer = await self.get_trainer(trainer_id, tenant_id)
        changes = data.changes()

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            if not validate_email(changes["email"]):
                raise ValidationException("Invalid email format")
            if changes["email"] != trainer.email and await self._email_taken(changes["email"], tenant_id):
                raise ConflictException("Email already in use by another trainer", code="EMAIL_EXISTS")

        return await self.store.update(COLLECTION, trainer_id, changes, tenant_id)

    async def delete_trainer(self, trainer_id: str, tenant_id: str) -> Trainer:
        """Remove a trainer and return the deleted record"""
        trainer = await self.get_trainer(trainer_id, tenant_id)
        await self.store.delete(COLLECTION, trainer_id, tenant_id)
        return trainer

    async def search_trainers(
        self,
        tenant_id: str,
        query: str | None = None,
        specialization: str | None = None,
        is_active: bool | None = None,
    ) -> list[Trainer]:
        """
        Filter by specialization and active flag, then by a term matched
        against name, email, specialization and phone.

        Best rated first, ties broken by name.
        """
        filters = {}
        if specialization:
            filters["specialization"] = specialization
        if is_active is not None:
            filters["is_active"] = is_active

        trainers = await self.store.query(COLLECTION, filters, tenant_id)

        term = (query or "").strip().lower()
        if term:
            trainers = [
                trainer
                for trainer in trainers
                if term in trainer.name.lower()
                or term in trainer.email.lower()
                or term in trainer.specialization.lower()
                or term in trainer.phone.lower()
            ]

        return sorted(trainers, key=lambda trainer: (-trainer.rating, trainer.name))

    async def get_stats(self, tenant_id: str) -> dict:
        trainers = await self.store.query(COLLECTION, tenant_id=tenant_id)
        return reporting.trainer_stats(trainers)
