"""Shared BDD fixtures and step definitions for the order lifecycle."""

import pytest
from pytest_bdd import given, parsers, then


@pytest.fixture()
def result():
    """Container for the outcome or error of a When step."""
    return {"outcome": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer with an email address")
def _(customers):
    return customers


@given("a catalogue of products")
def _(catalogue):
    return catalogue


@given(parsers.cfparse('an order in status "{status}"'), target_fixture="order")
def _(order_in, status):
    return order_in(status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order, repository, status):
    assert repository.find_by_id(str(order.id)).status == status


@then(parsers.re(r"(?P<count>\d+) notifications? (?:was|were) sent"), converters={"count": int})
def _(email, count):
    assert len(email.sent_emails) == count


@then(parsers.cfparse('the last notification has status label "{label}"'))
def _(email, label):
    assert f"Status: {label}\n" in email.sent_emails[-1]["body"]


@then(parsers.cfparse('the notification was acknowledged as "{outcome}"'))
def _(result, outcome):
    assert result["outcome"].outcome.value == outcome
