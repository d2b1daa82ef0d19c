"""In-memory directory adapters for development and testing."""

from ordering.directory.port import (
    CustomerDirectory,
    CustomerProfile,
    ProductCatalogue,
    ProductRecord,
)


class InMemoryCustomerDirectory(CustomerDirectory):
    def __init__(self, customers: list[CustomerProfile] | None = None) -> None:
        self.customers: dict[int, CustomerProfile] = {c.user_id: c for c in customers or []}

    def register(self, customer: CustomerProfile) -> None:
        self.customers[customer.user_id] = customer

    def get_customer(self, user_id: int) -> CustomerProfile | None:
        return self.customers.get(user_id)


class InMemoryCatalogue(ProductCatalogue):
    def __init__(self, products: list[ProductRecord] | None = None) -> None:
        self.products: dict[int, ProductRecord] = {p.product_id: p for p in products or []}

    def register(self, product: ProductRecord) -> None:
        self.products[product.product_id] = product

    def get_product(self, product_id: int) -> ProductRecord | None:
        return self.products.get(product_id)
