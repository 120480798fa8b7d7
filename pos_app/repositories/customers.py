"""Customer repository"""

from typing import Optional

from sqlalchemy import select
import structlog

from pos_app.models.customer import Customer
from pos_app.repositories.base import BaseRepository, storage_errors

logger = structlog.get_logger()


class CustomerRepository(BaseRepository):

    async def get(self, customer_id: int) -> Optional[Customer]:
        with storage_errors("get_customer", customer_id=customer_id):
            return await self.session.get(Customer, customer_id)

    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        logger.debug("Finding customer by phone", phone=phone)

        with storage_errors("find_customer_by_phone", phone=phone):
            result = await self.session.execute(
                select(Customer).where(Customer.phone == phone)
            )
            return result.scalar_one_or_none()

    async def create(self, customer: Customer) -> Customer:
        with storage_errors("create_customer", phone=customer.phone):
            self.session.add(customer)
            await self.session.flush()

        logger.info("Customer created", customer_id=customer.id, phone=customer.phone)
        return customer
