import re
import uuid
from decimal import Decimal

import pytest

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.audit_log import AuditLog
from parafort_core.models.business_entity import BusinessEntity
from parafort_core.models.formation_order import FormationOrder, OrderStatus, PaymentStatus
from parafort_core.models.user import User
from parafort_core.services.order_completion_service import OrderCompletionService, generate_order_id


class FakeDB:
    def __init__(self) -> None:
        self.added: list[object] = []
        self.commits = 0
        self.rollbacks = 0

    def add(self, obj: object) -> None:
        self.added.append(obj)

    async def flush(self) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class FakePublisher:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    async def publish(self, event_name, entity_id, payload, *, entity_type=None, correlation_id=None) -> None:
        self.events.append((event_name, payload))


class FakePayments:
    def __init__(self, intent: dict) -> None:
        self.intent = intent
        self.retrieved: list[str] = []

    async def retrieve_intent(self, payment_intent_id: str) -> dict:
        self.retrieved.append(payment_intent_id)
        return self.intent


class FakeMailer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict] = []

    def send_order_confirmation(self, **kwargs) -> str:
        if self.fail:
            raise RuntimeError("ses down")
        self.sent.append(kwargs)
        return "msg-1"


class FakeOrderRepository:
    def __init__(self) -> None:
        self.by_intent: dict[str, FormationOrder] = {}

    async def get_by_payment_intent(self, payment_intent_id: str) -> FormationOrder | None:
        return self.by_intent.get(payment_intent_id)

    async def create(self, order: FormationOrder) -> FormationOrder:
        order.id = order.id or uuid.uuid4()
        self.by_intent[order.stripe_payment_intent_id] = order
        return order


class FakeEntityRepository:
    def __init__(self, entities: list[BusinessEntity] | None = None) -> None:
        self.entities = {entity.id: entity for entity in entities or []}

    async def get_by_id(self, entity_id: uuid.UUID) -> BusinessEntity | None:
        return self.entities.get(entity_id)

    async def create(self, entity: BusinessEntity) -> BusinessEntity:
        entity.id = entity.id or uuid.uuid4()
        self.entities[entity.id] = entity
        return entity


class FakeUserRepository:
    def __init__(self, users: list[User] | None = None) -> None:
        self.users = {user.id: user for user in users or []}

    async def get_by_id(self, user_id: uuid.UUID) -> User | None:
        return self.users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return next((user for user in self.users.values() if user.email == email.lower()), None)


def _intent(*, status: str = "succeeded", user_id: uuid.UUID | None = None) -> dict:
    metadata = {
        "business_name": "Acme LLC",
        "entity_type": "LLC",
        "state": "DE",
        "contact_email": "owner@example.com",
        "customer_name": "Ada Lovelace",
    }
    if user_id is not None:
        metadata["user_id"] = str(user_id)
    return {
        "id": "pi_123abc",
        "status": status,
        "amount": 32500,
        "amount_received": 32500,
        "currency": "usd",
        "metadata": metadata,
    }


def _service(
    intent: dict,
    *,
    mailer: FakeMailer | None = None,
    users: list[User] | None = None,
    entities: list[BusinessEntity] | None = None,
) -> tuple[OrderCompletionService, FakeDB, FakePublisher]:
    db = FakeDB()
    publisher = FakePublisher()
    service = OrderCompletionService(
        db=db, publisher=publisher, payments=FakePayments(intent), mailer=mailer or FakeMailer()
    )
    service.repository = FakeOrderRepository()
    service.entity_repository = FakeEntityRepository(entities)
    service.user_repository = FakeUserRepository(users)
    return service, db, publisher


def test_order_id_format():
    for _ in range(20):
        assert re.fullmatch(r"PF-[A-Z0-9]{9}", generate_order_id())


@pytest.mark.asyncio
async def test_succeeded_intent_creates_entity_and_order() -> None:
    user = User(
        id=uuid.uuid4(), email="owner@example.com", hashed_password="x", first_name="Ada", last_name="Lovelace"
    )
    mailer = FakeMailer()
    service, db, publisher = _service(_intent(user_id=user.id), mailer=mailer, users=[user])

    result = await service.complete(payment_intent_id="pi_123abc", correlation_id="corr-1")

    assert result.success is True
    assert result.already_completed is False
    assert re.fullmatch(r"PF-[A-Z0-9]{9}", result.order_id)
    order = service.repository.by_intent["pi_123abc"]
    assert order.user_id == user.id
    assert order.total_amount == Decimal("325.00")
    assert order.payment_status == PaymentStatus.PAID
    assert order.status == OrderStatus.PENDING
    assert order.current_progress == 10
    assert result.business_entity_id == str(order.business_entity_id)
    assert service.entity_repository.entities[order.business_entity_id].name == "Acme LLC"
    assert db.commits == 1
    assert any(isinstance(obj, AuditLog) for obj in db.added)
    assert publisher.events[0][0] == "formation_order.created"
    assert mailer.sent[0]["order_id"] == order.order_id
    assert mailer.sent[0]["total_amount"] == "325.00"


@pytest.mark.asyncio
async def test_unpaid_intent_is_rejected() -> None:
    service, db, publisher = _service(_intent(status="requires_payment_method"))

    with pytest.raises(AppError) as exc:
        await service.complete(payment_intent_id="pi_123abc")

    assert exc.value.code == ErrorCodes.PAYMENT_NOT_COMPLETED
    assert exc.value.status_code == 409
    assert service.repository.by_intent == {}
    assert db.commits == 0
    assert publisher.events == []


@pytest.mark.asyncio
async def test_second_completion_returns_existing_order() -> None:
    service, db, publisher = _service(_intent())

    first = await service.complete(payment_intent_id="pi_123abc")
    second = await service.complete(payment_intent_id="pi_123abc")

    assert second.already_completed is True
    assert second.order_id == first.order_id
    assert second.business_entity_id == first.business_entity_id
    assert len(service.repository.by_intent) == 1
    assert service.payments.retrieved == ["pi_123abc"]
    assert db.commits == 1
    assert len(publisher.events) == 1


@pytest.mark.asyncio
async def test_email_failure_does_not_fail_completion() -> None:
    service, db, _ = _service(_intent(), mailer=FakeMailer(fail=True))

    result = await service.complete(payment_intent_id="pi_123abc")

    assert result.success is True
    assert db.commits == 1


@pytest.mark.asyncio
async def test_foreign_business_entity_is_hidden() -> None:
    owner = uuid.uuid4()
    entity = BusinessEntity(id=uuid.uuid4(), user_id=uuid.uuid4(), name="Other Co", entity_type="LLC", state="DE")
    service, _, _ = _service(_intent(user_id=owner), entities=[entity])

    with pytest.raises(AppError) as exc:
        await service.complete(payment_intent_id="pi_123abc", business_entity_id=entity.id, actor_user_id=owner)

    assert exc.value.code == ErrorCodes.BUSINESS_ENTITY_NOT_FOUND
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_owned_business_entity_is_reused() -> None:
    owner = uuid.uuid4()
    entity = BusinessEntity(id=uuid.uuid4(), user_id=owner, name="Acme LLC", entity_type="LLC", state="DE")
    service, _, _ = _service(_intent(user_id=owner), entities=[entity])

    result = await service.complete(
        payment_intent_id="pi_123abc", business_entity_id=entity.id, actor_user_id=owner, actor_role="client"
    )

    assert result.business_entity_id == str(entity.id)
    assert len(service.entity_repository.entities) == 1


@pytest.mark.asyncio
async def test_other_customers_payment_is_hidden() -> None:
    owner = uuid.uuid4()
    service, db, publisher = _service(_intent(user_id=owner))

    with pytest.raises(AppError) as exc:
        await service.complete(payment_intent_id="pi_123abc", actor_user_id=uuid.uuid4(), actor_role="client")

    assert exc.value.code == ErrorCodes.PAYMENT_INTENT_NOT_FOUND
    assert exc.value.status_code == 404
    assert service.repository.by_intent == {}
    assert service.entity_repository.entities == {}
    assert db.commits == 0
    assert publisher.events == []


@pytest.mark.asyncio
async def test_admin_completion_keeps_paying_customer_as_owner() -> None:
    owner = uuid.uuid4()
    service, _, _ = _service(_intent(user_id=owner))

    await service.complete(payment_intent_id="pi_123abc", actor_user_id=uuid.uuid4(), actor_role="admin")

    order = service.repository.by_intent["pi_123abc"]
    assert order.user_id == owner
    assert service.entity_repository.entities[order.business_entity_id].user_id == owner


@pytest.mark.asyncio
async def test_caller_owns_order_when_intent_names_no_customer() -> None:
    caller = uuid.uuid4()
    service, _, _ = _service(_intent())

    await service.complete(payment_intent_id="pi_123abc", actor_user_id=caller, actor_role="client")

    assert service.repository.by_intent["pi_123abc"].user_id == caller
