"""Directory adapter registry.

Provides get/set/reset helpers for the customer directory and product
catalogue. In-memory adapters are used unless something else is installed
at startup (or by a test).
"""

from ordering.directory.memory import InMemoryCatalogue, InMemoryCustomerDirectory
from ordering.directory.port import CustomerDirectory, ProductCatalogue

_current_customers: CustomerDirectory | None = None
_current_catalogue: ProductCatalogue | None = None


def get_customer_directory() -> CustomerDirectory:
    global _current_customers
    if _current_customers is None:
        _current_customers = InMemoryCustomerDirectory()
    return _current_customers


def set_customer_directory(directory: CustomerDirectory) -> None:
    global _current_customers
    _current_customers = directory


def get_catalogue() -> ProductCatalogue:
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = InMemoryCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: ProductCatalogue) -> None:
    global _current_catalogue
    _current_catalogue = catalogue


def reset_directories() -> None:
    """Reset to the default in-memory adapters."""
    global _current_customers, _current_catalogue
    _current_customers = None
    _current_catalogue = None
