"""
Tests for order submission, per-line review and manual orders
"""

import uuid
from decimal import Decimal

import pytest
from django.test import TestCase, override_settings

from apps.common.types import ErrorCode
from apps.opticians.models import LoyaltyPointsTransaction, Optician
from apps.orders.models import (
    Order,
    OrderItem,
    OrderItemStatus,
    OrderSource,
    OrderStatus,
    can_transition_item,
)
from apps.orders.services import OrderService
from tests.factories.marketplace import (
    RecordingNotifier,
    create_optician,
    create_pending_order,
    create_product,
)

ADMIN = "admin@marketplace.test"


class OrderItemTransitionTestCase(TestCase):
    def test_only_pending_lines_move(self):
        self.assertTrue(can_transition_item(OrderItemStatus.PENDING, OrderItemStatus.CONFIRMED))
        self.assertTrue(can_transition_item(OrderItemStatus.PENDING, OrderItemStatus.CANCELLED))
        self.assertFalse(can_transition_item(OrderItemStatus.CONFIRMED, OrderItemStatus.CANCELLED))
        self.assertFalse(can_transition_item(OrderItemStatus.CANCELLED, OrderItemStatus.CONFIRMED))


class OrderSubmissionTestCase(TestCase):
    def setUp(self):
        self.notifier = RecordingNotifier()
        self.optician = create_optician(business_name="Optique Atlas", phone="+212600000000")
        self.frame = create_product(name="Frame", price=Decimal("100.00"), sale_price=Decimal("80.00"), stock_qty=10)
        self.lens = create_product(name="Lens", price=Decimal("25.50"), stock_qty=10)

    def test_submission_snapshots_prices(self):
        result = OrderService.submit_order(
            self.optician,
            [{"product_id": str(self.frame.pk), "quantity": 2}, {"product_id": str(self.lens.pk), "quantity": 1}],
            note="Urgent",
            notifier=self.notifier,
        )

        order = result.unwrap()
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.source, OrderSource.OPTICIAN)
        self.assertEqual(order.currency, "EUR")
        self.assertEqual(order.total_amount, Decimal("185.50"))
        self.assertTrue(order.order_number.startswith("ORD-"))
        frame_line = order.items.get(product=self.frame)
        self.assertEqual((frame_line.unit_price, frame_line.line_total), (Decimal("80.00"), Decimal("160.00")))
        self.assertTrue(all(item.status == OrderItemStatus.PENDING for item in order.items.all()))

    def test_submission_does_not_touch_stock(self):
        OrderService.submit_order(self.optician, [{"product_id": self.frame.pk, "quantity": 4}], notifier=self.notifier)
        self.frame.refresh_from_db()
        self.assertEqual(self.frame.stock_qty, 10)

    def test_admin_message_lists_lines(self):
        OrderService.submit_order(self.optician, [{"product_id": self.frame.pk, "quantity": 2}], notifier=self.notifier)

        subject, message, metadata = self.notifier.admin_messages[0]
        self.assertEqual(subject, "New order")
        self.assertIn("Optique Atlas", message)
        self.assertIn("1. Frame", message)
        self.assertIn("Qty: 2", message)
        self.assertIn("order_id", metadata)

    def test_rejections(self):
        inactive = create_product(is_active=False)
        cases = [
            ([{"product_id": uuid.uuid4(), "quantity": 1}], ErrorCode.PRODUCT_NOT_FOUND),
            ([{"product_id": inactive.pk, "quantity": 1}], ErrorCode.PRODUCT_UNAVAILABLE),
            ([{"product_id": self.lens.pk, "quantity": 11}], ErrorCode.INSUFFICIENT_STOCK),
            ([{"product_id": self.lens.pk, "quantity": 0}], ErrorCode.VALIDATION_ERROR),
            ([], ErrorCode.VALIDATION_ERROR),
        ]
        for items, code in cases:
            with self.subTest(code=code, items=items):
                result = OrderService.submit_order(self.optician, items, notifier=self.notifier)
                self.assertEqual(result.unwrap_err().code, code)
        self.assertFalse(Order.objects.exists())

    def test_pending_optician_cannot_order(self):
        pending = create_optician(status=Optician.STATUS_PENDING)
        result = OrderService.submit_order(pending, [{"product_id": self.frame.pk, "quantity": 1}], notifier=self.notifier)
        self.assertEqual(result.unwrap_err().code, ErrorCode.FORBIDDEN)

    @override_settings(ADMIN_WHATSAPP_NUMBER="+212 600-000-001")
    def test_admin_whatsapp_link(self):
        order = OrderService.submit_order(
            self.optician, [{"product_id": self.frame.pk, "quantity": 1}], notifier=self.notifier
        ).unwrap()

        link = OrderService.admin_whatsapp_link(order)

        self.assertTrue(link.startswith("https://wa.me/212600000001?text="))
        self.assertNotIn(" ", link)

    @override_settings(ADMIN_WHATSAPP_NUMBER="")
    def test_no_whatsapp_link_without_admin_number(self):
        order = create_pending_order(self.optician, [(self.frame, 1)])
        self.assertIsNone(OrderService.admin_whatsapp_link(order))


class OrderItemReviewTestCase(TestCase):
    def setUp(self):
        self.notifier = RecordingNotifier()
        self.optician = create_optician(loyalty_points=0)
        self.product = create_product(stock_qty=3, loyalty_points_reward=10)

    def test_confirm_fails_when_stock_short(self):
        order = create_pending_order(self.optician, [(self.product, 5)])
        item = order.items.get()

        result = OrderService.confirm_item(item.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(result.unwrap_err().code, ErrorCode.INSUFFICIENT_STOCK)
        self.assertEqual(result.unwrap_err().message, "insufficient stock: available 3, requested 5")
        self.product.refresh_from_db()
        item.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 3)
        self.assertEqual(item.status, OrderItemStatus.PENDING)

    def test_confirm_takes_stock_and_awards_points(self):
        order = create_pending_order(self.optician, [(self.product, 2)])
        item = order.items.get()

        confirmed = OrderService.confirm_item(item.pk, ADMIN, notifier=self.notifier).unwrap()

        self.assertEqual(confirmed.status, OrderItemStatus.CONFIRMED)
        self.assertEqual(confirmed.confirmed_by, ADMIN)
        self.assertIsNotNone(confirmed.confirmed_at)
        self.product.refresh_from_db()
        self.assertEqual((self.product.stock_qty, self.product.in_stock), (1, True))
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.APPROVED)
        self.assertIsNotNone(order.validated_at)
        self.optician.refresh_from_db()
        self.assertEqual(self.optician.loyalty_points, 20)
        self.assertEqual(
            LoyaltyPointsTransaction.objects.get(optician=self.optician).transaction_type,
            LoyaltyPointsTransaction.TYPE_EARNED,
        )
        self.assertEqual(len(self.notifier.optician_messages), 1)

    def test_confirming_last_units_marks_out_of_stock(self):
        order = create_pending_order(self.optician, [(self.product, 3)])
        OrderService.confirm_item(order.items.get().pk, ADMIN, notifier=self.notifier)

        self.product.refresh_from_db()
        self.assertEqual((self.product.stock_qty, self.product.in_stock), (0, False))

    def test_terminal_lines_are_already_processed(self):
        order = create_pending_order(self.optician, [(self.product, 1)])
        item = order.items.get()
        OrderService.confirm_item(item.pk, ADMIN, notifier=self.notifier)

        again = OrderService.confirm_item(item.pk, ADMIN, notifier=self.notifier)
        cancel = OrderService.cancel_item(item.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(again.unwrap_err().code, ErrorCode.ALREADY_PROCESSED)
        self.assertEqual(cancel.unwrap_err().code, ErrorCode.ALREADY_PROCESSED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 2)

    def test_cancel_leaves_stock(self):
        order = create_pending_order(self.optician, [(self.product, 1), (self.product, 2)])
        first, second = order.items.order_by("quantity")

        cancelled = OrderService.cancel_item(first.pk, ADMIN, notifier=self.notifier).unwrap()

        self.assertEqual(cancelled.status, OrderItemStatus.CANCELLED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 3)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PENDING)

        OrderService.cancel_item(second.pk, ADMIN, notifier=self.notifier)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.CANCELLED)

    def test_no_points_without_reward(self):
        plain = create_product(stock_qty=5)
        order = create_pending_order(self.optician, [(plain, 1)])

        OrderService.confirm_item(order.items.get().pk, ADMIN, notifier=self.notifier)

        self.assertFalse(LoyaltyPointsTransaction.objects.exists())

    def test_unknown_item(self):
        result = OrderService.confirm_item(uuid.uuid4(), ADMIN, notifier=self.notifier)
        self.assertEqual(result.unwrap_err().code, ErrorCode.NOT_FOUND)


class ManualOrderTestCase(TestCase):
    def setUp(self):
        self.optician = create_optician()
        self.frame = create_product(name="Frame", price=Decimal("100.00"), sale_price=Decimal("90.00"), stock_qty=5)
        self.lens = create_product(name="Lens", price=Decimal("20.00"), stock_qty=2)

    def test_one_short_line_rejects_whole_order(self):
        result = OrderService.create_manual_order(
            self.optician.pk,
            [{"product_id": self.frame.pk, "quantity": 1}, {"product_id": self.lens.pk, "quantity": 3}],
            ADMIN,
        )

        self.assertEqual(result.unwrap_err().code, ErrorCode.INSUFFICIENT_STOCK)
        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderItem.objects.exists())
        self.frame.refresh_from_db()
        self.lens.refresh_from_db()
        self.assertEqual((self.frame.stock_qty, self.lens.stock_qty), (5, 2))

    def test_demand_is_summed_per_product(self):
        result = OrderService.create_manual_order(
            self.optician.pk,
            [{"product_id": self.lens.pk, "quantity": 1}, {"product_id": self.lens.pk, "quantity": 2}],
            ADMIN,
        )
        self.assertEqual(result.unwrap_err().code, ErrorCode.INSUFFICIENT_STOCK)
        self.assertEqual(result.unwrap_err().details["requested"], 3)

    def test_manual_order_is_approved_and_takes_stock(self):
        order = OrderService.create_manual_order(
            self.optician.pk,
            [{"product_id": self.frame.pk, "quantity": 2}, {"product_id": self.lens.pk, "quantity": 2}],
            ADMIN,
            note="Phone order",
        ).unwrap()

        self.assertEqual((order.status, order.source), (OrderStatus.APPROVED, OrderSource.MANUAL))
        self.assertIsNotNone(order.validated_at)
        self.assertEqual(order.created_by, ADMIN)
        self.assertEqual(order.total_amount, Decimal("220.00"))
        self.assertEqual(
            set(order.items.values_list("status", flat=True)), {OrderItemStatus.CONFIRMED}
        )
        self.frame.refresh_from_db()
        self.lens.refresh_from_db()
        self.assertEqual((self.frame.stock_qty, self.lens.stock_qty), (3, 0))
        self.assertFalse(self.lens.in_stock)

    def test_optician_must_exist_and_be_approved(self):
        items = [{"product_id": self.frame.pk, "quantity": 1}]
        pending = create_optician(status=Optician.STATUS_PENDING)

        self.assertEqual(
            OrderService.create_manual_order(uuid.uuid4(), items, ADMIN).unwrap_err().code, ErrorCode.NOT_FOUND
        )
        self.assertEqual(
            OrderService.create_manual_order(pending.pk, items, ADMIN).unwrap_err().code, ErrorCode.VALIDATION_ERROR
        )

    def test_unknown_product(self):
        result = OrderService.create_manual_order(self.optician.pk, [{"product_id": uuid.uuid4(), "quantity": 1}], ADMIN)
        self.assertEqual(result.unwrap_err().code, ErrorCode.PRODUCT_NOT_FOUND)

    def test_listing(self):
        OrderService.create_manual_order(self.optician.pk, [{"product_id": self.frame.pk, "quantity": 1}], ADMIN)
        create_pending_order(create_optician(), [(self.frame, 1)])

        self.assertEqual(OrderService.list_for_optician(self.optician).count(), 1)
        self.assertEqual(OrderService.list_orders(OrderStatus.PENDING).count(), 1)
        self.assertEqual(OrderService.list_orders().count(), 2)


@pytest.mark.django_db
def test_submitted_order_is_announced_to_admin(optician, product, notifier):
    order = OrderService.submit_order(
        optician, [{"product_id": str(product.pk), "quantity": 2}], notifier=notifier
    ).unwrap()

    assert order.items.count() == 1
    subject, message, metadata = notifier.admin_messages[0]
    assert subject == "New order"
    assert product.name in message
    assert metadata == {"order_id": str(order.pk)}
