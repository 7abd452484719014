"""Customer profile management — commands and handler.

Profiles are created on first use: saving an address or picking a payment
method for an unknown user id starts a fresh profile.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.customer.customer import Customer, PaymentMethod
from ordering.domain import ordering


@ordering.command(part_of="Customer")
class RegisterCustomer:
    user_id = Identifier(required=True)
    name = String(max_length=255)
    email = String(max_length=255)


@ordering.command(part_of="Customer")
class SaveShippingAddress:
    user_id = Identifier(required=True)
    full_name = String(required=True, max_length=255)
    street_address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@ordering.command(part_of="Customer")
class SelectPaymentMethod:
    user_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod, max_length=50)


def _load_or_start(repo, user_id) -> Customer:
    try:
        return repo.get(user_id)
    except ObjectNotFoundError:
        return Customer.register(user_id=user_id)


@ordering.command_handler(part_of=Customer)
class ManageCustomerProfileHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)
        customer = _load_or_start(repo, command.user_id)
        customer.name = command.name
        customer.email = command.email
        repo.add(customer)
        return str(customer.user_id)

    @handle(SaveShippingAddress)
    def save_shipping_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = _load_or_start(repo, command.user_id)
        customer.save_address(
            full_name=command.full_name,
            street_address=command.street_address,
            city=command.city,
            postal_code=command.postal_code,
            country=command.country,
        )
        repo.add(customer)

    @handle(SelectPaymentMethod)
    def select_payment_method(self, command):
        repo = current_domain.repository_for(Customer)
        customer = _load_or_start(repo, command.user_id)
        customer.select_payment_method(command.payment_method)
        repo.add(customer)
