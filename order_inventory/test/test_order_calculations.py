"""
Derived order values and the status transition table
"""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from order_inventory.business.core.money import to_money
from order_inventory.business.orders import order_calculations as calc
from order_inventory.business.orders.order_status_validator import OrderStatusValidator


def item(quantity, cancelled=0, price='10.00'):
    return SimpleNamespace(quantity=quantity, cancelled_quantity=cancelled, unit_price=Decimal(price))


def test_active_quantity_and_remaining():
    line = item(5, cancelled=2)
    assert calc.active_quantity(line) == 3
    assert calc.remaining_cancellable(line) == 3
    assert not calc.is_item_fully_cancelled(line)
    assert calc.is_item_fully_cancelled(item(2, cancelled=2))


def test_active_total_ignores_cancelled_units():
    items = [item(2, cancelled=1, price='50.00'), item(2, price='25.00')]
    assert calc.calculate_active_total(items) == Decimal('100.00')
    assert calc.calculate_gross_total(items) == Decimal('150.00')


def test_totals_keep_two_decimals():
    items = [item(3, price='0.10'), item(1, price='19.99')]
    assert calc.calculate_active_total(items) == Decimal('20.29')
    assert str(calc.calculate_active_total([])) == '0.00'


def test_fully_cancelled_by_status_or_items():
    assert calc.is_order_fully_cancelled('cancelled', [item(2)])
    assert calc.is_order_fully_cancelled('confirmed', [item(2, 2), item(1, 1)])
    assert not calc.is_order_fully_cancelled('confirmed', [item(2, 2), item(1)])
    assert not calc.is_order_fully_cancelled('pending', [])


def test_partially_cancelled():
    assert calc.is_order_partially_cancelled('partially_cancelled', [item(2)])
    assert calc.is_order_partially_cancelled('confirmed', [item(2, 1)])
    assert not calc.is_order_partially_cancelled('confirmed', [item(2, 2)])
    assert not calc.is_order_partially_cancelled('confirmed', [item(2)])


@pytest.mark.parametrize('status, items, expected', [
    ('confirmed', [item(2, 1), item(2)], 'partially_cancelled'),
    ('partially_cancelled', [item(2, 2), item(2, 1)], 'partially_cancelled'),
    ('confirmed', [item(2, 2), item(2, 2)], 'cancelled'),
    ('pending', [item(2, 1)], 'pending'),
    ('pending', [item(2, 2)], 'cancelled'),
])
def test_status_after_item_cancellation(status, items, expected):
    assert calc.status_after_item_cancellation(status, items) == expected


def test_inventory_committed_statuses():
    assert calc.inventory_is_committed('confirmed')
    assert calc.inventory_is_committed('partially_cancelled')
    assert not calc.inventory_is_committed('pending')
    assert not calc.inventory_is_committed('cancelled')


@pytest.mark.parametrize('current, new, allowed', [
    ('pending', 'confirmed', True),
    ('pending', 'cancelled', True),
    ('pending', 'partially_cancelled', False),
    ('confirmed', 'partially_cancelled', True),
    ('confirmed', 'pending', False),
    ('partially_cancelled', 'confirmed', False),
    ('partially_cancelled', 'cancelled', True),
    ('cancelled', 'confirmed', False),
    ('cancelled', 'cancelled', False),
    ('confirmed', 'shipped', False),
])
def test_status_transitions(current, new, allowed):
    assert OrderStatusValidator.can_transition(current, new) is allowed


def test_apply_rejects_leaving_cancelled():
    order = SimpleNamespace(id=7, status='cancelled')
    with pytest.raises(ValueError):
        OrderStatusValidator.apply(order, 'confirmed')
    assert order.status == 'cancelled'

    order = SimpleNamespace(id=8, status='pending')
    change = OrderStatusValidator.apply(order, 'confirmed')
    assert change.changed
    assert (change.from_status, change.to_status) == ('pending', 'confirmed')
    assert order.status == 'confirmed'


@pytest.mark.parametrize('raw, expected', [
    (10, '10.00'),
    ('19.999', '20.00'),
    (0.1, '0.10'),
    (None, '0.00'),
])
def test_to_money(raw, expected):
    assert str(to_money(raw)) == expected


def test_to_money_rejects_garbage():
    with pytest.raises(ValueError):
        to_money('ten dollars')
