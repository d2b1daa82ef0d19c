"""Lookup ports for data owned by other services.

Customer accounts and the product catalogue live outside the ordering core.
Orders only need read access: the customer's contact and shipping details
for the payment gateway and notifications, and product data to snapshot
into line items.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CustomerProfile:
    user_id: int
    name: str
    email: str
    phone: str = ""
    address: str = ""
    post_code: str = ""


@dataclass(frozen=True)
class ProductRecord:
    product_id: int
    name: str
    price: int
    description: str = ""
    image: str = ""

    def snapshot(self) -> dict:
        """Field values for a ProductSnapshot value object."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image": self.image,
        }


class CustomerDirectory(ABC):
    @abstractmethod
    def get_customer(self, user_id: int) -> CustomerProfile | None:
        """Return the customer's profile, or None if there is no such user."""
        ...


class ProductCatalogue(ABC):
    @abstractmethod
    def get_product(self, product_id: int) -> ProductRecord | None:
        """Return the product as currently listed, or None if it does not exist."""
        ...
