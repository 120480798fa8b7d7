"""Customer resolution tests"""

from types import SimpleNamespace

import pytest
from sqlalchemy import select, func

from pos_app.errors import CustomerLookupFailed, StorageError
from pos_app.models.customer import Customer, CustomerTitle
from pos_app.schemas.customer import CustomerContact
from pos_app.services.customers import CustomerResolver
from pos_app.services.unit_of_work import UnitOfWork


async def count_customers(session_factory, phone):
    async with session_factory() as session:
        result = await session.execute(
            select(func.count(Customer.id)).where(Customer.phone == phone)
        )
        return result.scalar()


async def test_resolve_creates_customer_on_first_contact(session_factory):
    contact = CustomerContact(
        title="Dr",
        first_name="Budi",
        last_name="Santoso",
        phone="+628120000001",
        email="budi@example.com",
    )

    async with UnitOfWork(session_factory) as uow:
        customer = await CustomerResolver().resolve(uow, contact)

    assert customer.id is not None
    assert customer.title == CustomerTitle.DR
    assert customer.first_name == "Budi"
    assert await count_customers(session_factory, "+628120000001") == 1


async def test_resolve_same_phone_returns_first_record_unchanged(session_factory):
    resolver = CustomerResolver()

    async with UnitOfWork(session_factory) as uow:
        first = await resolver.resolve(
            uow, CustomerContact(first_name="Alice", last_name="Wong", phone="+628120000002")
        )

    async with UnitOfWork(session_factory) as uow:
        second = await resolver.resolve(
            uow,
            CustomerContact(
                first_name="Alicia",
                last_name="Tan",
                phone="+628120000002",
                email="other@example.com",
            ),
        )

    assert second.id == first.id
    assert second.first_name == "Alice"
    assert second.last_name == "Wong"
    assert second.email is None
    assert await count_customers(session_factory, "+628120000002") == 1


async def test_resolve_is_rolled_back_with_its_unit_of_work(session_factory):
    with pytest.raises(RuntimeError):
        async with UnitOfWork(session_factory) as uow:
            await CustomerResolver().resolve(
                uow, CustomerContact(first_name="Carl", phone="+628120000003")
            )
            raise RuntimeError("abort")

    assert await count_customers(session_factory, "+628120000003") == 0


async def test_storage_failure_surfaces_as_lookup_failure():
    class BrokenCustomers:
        async def find_by_phone(self, phone):
            raise StorageError("connection lost")

    uow = SimpleNamespace(customers=BrokenCustomers())

    with pytest.raises(CustomerLookupFailed) as exc_info:
        await CustomerResolver().resolve(uow, CustomerContact(first_name="Dina", phone="+628120000004"))

    assert exc_info.value.context["phone"] == "+628120000004"
    assert isinstance(exc_info.value, StorageError)


def test_contact_blank_optional_fields_are_treated_as_missing():
    contact = CustomerContact(title="", first_name=" Eko ", last_name="  ", phone="0812", email="")

    assert contact.title is None
    assert contact.last_name is None
    assert contact.email is None
    assert contact.first_name == "Eko"


@pytest.mark.parametrize("field,value", [
    ("first_name", "A"),
    ("phone", ""),
    ("email", "not-an-email"),
])
def test_contact_rejects_invalid_fields(field, value):
    data = {"first_name": "Alice", "phone": "0812", field: value}

    with pytest.raises(ValueError):
        CustomerContact(**data)
