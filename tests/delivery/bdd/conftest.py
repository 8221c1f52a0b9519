"""Shared BDD fixtures and step definitions for the Delivery domain."""

import json

import pytest
from delivery.bordereau.creation import CreateBordereau
from delivery.errors import Forbidden, InvalidTransition, TerminalStateError
from delivery.order.claim import ClaimOrder
from delivery.order.order import DeliveryOrder, OrderStatus
from delivery.order.transition import ApplyTransition
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

_OUTCOME_ERRORS = (Forbidden, ValidationError)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the exception raised by the last step, if any."""
    return {"exc": None}


def _order(number) -> DeliveryOrder:
    return current_domain.repository_for(DeliveryOrder).find_by_order_number(number)


def record_outcome(actor, number, status, error, note=None):
    error["exc"] = None
    try:
        current_domain.process(
            ApplyTransition(
                order_id=str(_order(number).id),
                actor_id=actor,
                actor_role="delivery_man",
                target_status=status,
                note=note,
            ),
            asynchronous=False,
        )
    except _OUTCOME_ERRORS as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('order "{number}" worth {total} is ready for delivery'))
def ready_order(register_order, number, total):
    register_order(number, total=total, status=OrderStatus.SHIPPED.value)


@given(parsers.cfparse('order "{number}" worth {total} is held by "{agent}"'))
def held_order(register_order, number, total, agent):
    register_order(number, total=total, status=OrderStatus.SHIPPED.value)
    current_domain.process(
        ClaimOrder(identifier=number, agent_id=agent, actor_role="delivery_man"),
        asynchronous=False,
    )


@given(parsers.cfparse('bordereau "{code}" groups "{numbers}"'))
def bordereau_groups(code, numbers):
    current_domain.process(
        CreateBordereau(
            code=code,
            order_identifiers=json.dumps(numbers.split(",")),
            organization_id="org-1",
            actor_role="admin",
        ),
        asynchronous=False,
    )


@given(parsers.re(r'"(?P<actor>[^"]+)" marks order "(?P<number>[^"]+)" as "(?P<status>[^"]+)"$'))
@when(parsers.re(r'"(?P<actor>[^"]+)" marks order "(?P<number>[^"]+)" as "(?P<status>[^"]+)"$'))
def mark_order(actor, number, status, error):
    record_outcome(actor, number, status, error)


@when(parsers.re(r'"(?P<actor>[^"]+)" marks order "(?P<number>[^"]+)" as "(?P<status>[^"]+)" with note "(?P<note>[^"]+)"$'))
def mark_order_with_note(actor, number, status, note, error):
    record_outcome(actor, number, status, error, note=note)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('order "{number}" is held by "{agent}"'))
def order_held_by(number, agent):
    assert _order(number).assigned_agent_id == agent


@then(parsers.cfparse('order "{number}" is not held by anyone'))
def order_not_held(number):
    assert _order(number).assigned_agent_id is None


@then(parsers.cfparse('order "{number}" has status "{status}"'))
def order_has_status(number, status):
    assert _order(number).status == status


@then("the outcome is rejected as an invalid transition")
def outcome_invalid(error):
    assert isinstance(error["exc"], InvalidTransition)
    assert not isinstance(error["exc"], TerminalStateError)


@then("the outcome is rejected because the order is final")
def outcome_terminal(error):
    assert isinstance(error["exc"], TerminalStateError)


@then("the outcome is forbidden")
def outcome_forbidden(error):
    assert isinstance(error["exc"], Forbidden)
