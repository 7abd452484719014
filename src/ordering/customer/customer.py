"""Customer checkout profile.

Authentication lives outside this codebase; the identity collaborator hands
us a user id per request. What checkout needs beyond that id is kept here:
a contact email for receipts, the saved shipping address, and the payment
method the buyer picked. The aggregate is keyed by the user id itself.
"""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Identifier, String, ValueObject

from ordering.domain import ordering


class PaymentMethod(Enum):
    PAYPAL = "PayPal"
    STRIPE = "Stripe"
    CASH_ON_DELIVERY = "CashOnDelivery"


@ordering.value_object(part_of="Customer")
class SavedAddress:
    """The address a customer ships to by default."""

    full_name = String(required=True, max_length=255)
    street_address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@ordering.aggregate
class Customer:
    user_id = Identifier(identifier=True)
    name = String(max_length=255)
    email = String(max_length=255)
    address = ValueObject(SavedAddress)
    payment_method = String(choices=PaymentMethod, max_length=50)

    @classmethod
    def register(cls, user_id, name=None, email=None):
        return cls(user_id=user_id, name=name, email=email)

    def save_address(self, full_name, street_address, city, postal_code, country):
        self.address = SavedAddress(
            full_name=full_name,
            street_address=street_address,
            city=city,
            postal_code=postal_code,
            country=country,
        )

    def select_payment_method(self, payment_method):
        try:
            self.payment_method = PaymentMethod(payment_method).value
        except ValueError:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]})

    @property
    def has_address(self) -> bool:
        return self.address is not None

    @property
    def has_payment_method(self) -> bool:
        return bool(self.payment_method)
