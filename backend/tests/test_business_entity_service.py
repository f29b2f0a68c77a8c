import uuid

import pytest

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.business_entity import BusinessEntity
from parafort_core.schemas.auth import CurrentUser
from parafort_core.services.business_entity_service import BusinessEntityService


class FakeRepository:
    def __init__(self, entities: list[BusinessEntity]) -> None:
        self.entities = {entity.id: entity for entity in entities}

    async def get_by_id(self, entity_id: uuid.UUID) -> BusinessEntity | None:
        return self.entities.get(entity_id)


def _service(*entities: BusinessEntity) -> BusinessEntityService:
    service = BusinessEntityService(db=None)
    service.repository = FakeRepository(list(entities))
    return service


def _entity(owner: uuid.UUID) -> BusinessEntity:
    return BusinessEntity(id=uuid.uuid4(), user_id=owner, name="Acme LLC", entity_type="LLC", state="DE")


@pytest.mark.asyncio
async def test_owner_can_access_entity() -> None:
    owner = uuid.uuid4()
    entity = _entity(owner)

    found = await _service(entity).require_accessible(
        current_user=CurrentUser(user_id=owner, role="client"), entity_id=entity.id
    )

    assert found is entity


@pytest.mark.asyncio
async def test_admin_can_access_any_entity() -> None:
    entity = _entity(uuid.uuid4())

    found = await _service(entity).require_accessible(
        current_user=CurrentUser(user_id=uuid.uuid4(), role="admin"), entity_id=entity.id
    )

    assert found is entity


@pytest.mark.asyncio
async def test_other_clients_entity_looks_missing() -> None:
    entity = _entity(uuid.uuid4())
    service = _service(entity)
    stranger = CurrentUser(user_id=uuid.uuid4(), role="client")

    with pytest.raises(AppError) as foreign:
        await service.require_accessible(current_user=stranger, entity_id=entity.id)
    with pytest.raises(AppError) as missing:
        await service.require_accessible(current_user=stranger, entity_id=uuid.uuid4())

    assert foreign.value.code == missing.value.code == ErrorCodes.BUSINESS_ENTITY_NOT_FOUND
    assert foreign.value.status_code == missing.value.status_code == 404
