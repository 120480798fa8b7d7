"""Customer resolution for incoming reservations"""

import structlog

from pos_app.errors import CustomerLookupFailed, StorageError
from pos_app.models.customer import Customer
from pos_app.schemas.customer import CustomerContact
from pos_app.services.unit_of_work import UnitOfWork

logger = structlog.get_logger()


class CustomerResolver:
    """Finds the customer owning a phone number, creating one on first contact"""

    async def resolve(self, uow: UnitOfWork, contact: CustomerContact) -> Customer:
        """
        Return the customer registered under ``contact.phone``.

        An existing record is returned unchanged even when the new contact
        details differ: the first reservation's details win.
        """
        try:
            customer = await uow.customers.find_by_phone(contact.phone)
            if customer is not None:
                logger.debug("Existing customer found", customer_id=customer.id, phone=contact.phone)
                return customer

            logger.debug("Creating new customer", phone=contact.phone)
            customer = await uow.customers.create(
                Customer(
                    title=contact.title,
                    first_name=contact.first_name,
                    last_name=contact.last_name,
                    phone=contact.phone,
                    email=contact.email,
                )
            )
        except StorageError as exc:
            raise CustomerLookupFailed(phone=contact.phone) from exc

        return customer
