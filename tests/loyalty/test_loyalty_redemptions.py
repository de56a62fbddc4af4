"""
Tests for the loyalty redemption workflow
"""

import uuid

from django.test import TestCase

from apps.common.types import ErrorCode
from apps.loyalty.models import LoyaltyRedemption, RedemptionStatus, can_transition_redemption
from apps.loyalty.services import DEFAULT_REJECTION_REASON, RedemptionService
from apps.opticians.models import LoyaltyPointsTransaction
from tests.factories.marketplace import (
    RecordingNotifier,
    create_loyalty_product,
    create_optician,
    create_pending_redemption,
    create_product,
)

ADMIN = "admin@marketplace.test"


class RedemptionTransitionTestCase(TestCase):
    def test_only_pending_moves(self):
        self.assertTrue(can_transition_redemption(RedemptionStatus.PENDING, RedemptionStatus.APPROVED))
        self.assertTrue(can_transition_redemption(RedemptionStatus.PENDING, RedemptionStatus.REJECTED))
        self.assertFalse(can_transition_redemption(RedemptionStatus.APPROVED, RedemptionStatus.REJECTED))
        self.assertFalse(can_transition_redemption(RedemptionStatus.REJECTED, RedemptionStatus.APPROVED))


class RedemptionCreationTestCase(TestCase):
    def setUp(self):
        self.notifier = RecordingNotifier()
        self.frame = create_product(name="Frame", stock_qty=5)
        self.sunglasses = create_loyalty_product(name="Sunglasses", points_cost=150, product=self.frame)
        self.kit = create_loyalty_product(name="Cleaning kit", points_cost=100)

    def test_creation_leaves_balance_untouched(self):
        optician = create_optician(loyalty_points=500)

        result = RedemptionService.create_redemption(
            optician,
            [{"loyalty_product_id": str(self.sunglasses.pk), "quantity": 1}, {"loyalty_product_id": str(self.kit.pk), "quantity": 1}],
            notifier=self.notifier,
        )

        self.assertTrue(result.is_ok())
        redemption = result.unwrap()
        self.assertEqual(redemption.status, RedemptionStatus.PENDING)
        self.assertEqual(redemption.total_points, 250)
        self.assertEqual(redemption.items.count(), 2)
        optician.refresh_from_db()
        self.assertEqual(optician.loyalty_points, 500)
        self.assertEqual(len(self.notifier.admin_messages), 1)

    def test_insufficient_points_creates_nothing(self):
        optician = create_optician(loyalty_points=100)

        result = RedemptionService.create_redemption(
            optician,
            [{"loyalty_product_id": self.sunglasses.pk, "quantity": 1}, {"loyalty_product_id": self.kit.pk, "quantity": 1}],
            notifier=self.notifier,
        )

        self.assertEqual(result.unwrap_err().code, ErrorCode.INSUFFICIENT_POINTS)
        self.assertEqual(result.unwrap_err().message, "insufficient points: available 100, required 250")
        self.assertFalse(LoyaltyRedemption.objects.exists())
        self.assertEqual(self.notifier.admin_messages, [])

    def test_snapshot_survives_catalog_changes(self):
        optician = create_optician(loyalty_points=500)
        redemption = RedemptionService.create_redemption(
            optician, [{"loyalty_product_id": self.kit.pk, "quantity": 2}], notifier=self.notifier
        ).unwrap()

        self.kit.name = "Renamed kit"
        self.kit.points_cost = 999
        self.kit.save()

        item = redemption.items.get()
        self.assertEqual((item.product_name, item.points_cost, item.total_points), ("Cleaning kit", 100, 200))

    def test_repeated_product_lines_are_merged(self):
        optician = create_optician(loyalty_points=500)
        redemption = RedemptionService.create_redemption(
            optician,
            [{"loyalty_product_id": self.kit.pk, "quantity": 1}, {"loyalty_product_id": self.kit.pk, "quantity": 2}],
            notifier=self.notifier,
        ).unwrap()

        self.assertEqual(redemption.items.get().quantity, 3)
        self.assertEqual(redemption.total_points, 300)

    def test_claimed_total_is_ignored(self):
        optician = create_optician(loyalty_points=500)
        redemption = RedemptionService.create_redemption(
            optician, [{"loyalty_product_id": self.kit.pk, "quantity": 1}], claimed_total=1, notifier=self.notifier
        ).unwrap()
        self.assertEqual(redemption.total_points, 100)

    def test_unavailable_rewards_rejected(self):
        optician = create_optician(loyalty_points=5000)
        inactive = create_loyalty_product(is_active=False)
        sold_out = create_loyalty_product(product=create_product(stock_qty=0))

        for reward in (inactive, sold_out):
            with self.subTest(reward=reward.pk):
                result = RedemptionService.create_redemption(
                    optician, [{"loyalty_product_id": reward.pk, "quantity": 1}], notifier=self.notifier
                )
                self.assertEqual(result.unwrap_err().code, ErrorCode.PRODUCT_UNAVAILABLE)

    def test_invalid_requests(self):
        optician = create_optician(loyalty_points=500)
        cases = [
            ([], ErrorCode.VALIDATION_ERROR),
            ([{"loyalty_product_id": "not-a-uuid", "quantity": 1}], ErrorCode.VALIDATION_ERROR),
            ([{"loyalty_product_id": self.kit.pk, "quantity": 0}], ErrorCode.VALIDATION_ERROR),
            ([{"loyalty_product_id": uuid.uuid4(), "quantity": 1}], ErrorCode.PRODUCT_NOT_FOUND),
        ]
        for items, code in cases:
            with self.subTest(items=items):
                result = RedemptionService.create_redemption(optician, items, notifier=self.notifier)
                self.assertEqual(result.unwrap_err().code, code)


class RedemptionReviewTestCase(TestCase):
    def setUp(self):
        self.notifier = RecordingNotifier()
        self.frame = create_product(name="Frame", stock_qty=5)
        self.sunglasses = create_loyalty_product(name="Sunglasses", points_cost=150, product=self.frame)
        self.kit = create_loyalty_product(name="Cleaning kit", points_cost=100)
        self.optician = create_optician(loyalty_points=500)
        self.redemption = create_pending_redemption(self.optician, [(self.sunglasses, 1), (self.kit, 1)])

    def test_approval_debits_points(self):
        result = RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)

        self.assertTrue(result.is_ok())
        redemption = result.unwrap()
        self.assertEqual(redemption.status, RedemptionStatus.APPROVED)
        self.assertIsNotNone(redemption.approved_at)
        self.assertEqual(redemption.approved_by, ADMIN)
        self.optician.refresh_from_db()
        self.assertEqual(self.optician.loyalty_points, 250)
        entry = LoyaltyPointsTransaction.objects.get(optician=self.optician)
        self.assertEqual((entry.transaction_type, entry.points), (LoyaltyPointsTransaction.TYPE_REDEEMED, -250))
        self.assertEqual(len(self.notifier.optician_messages), 1)

    def test_approval_does_not_touch_stock(self):
        RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)
        self.frame.refresh_from_db()
        self.assertEqual(self.frame.stock_qty, 5)

    def test_second_approval_is_already_processed(self):
        RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)

        again = RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)
        rejected = RedemptionService.reject_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(again.unwrap_err().code, ErrorCode.ALREADY_PROCESSED)
        self.assertEqual(rejected.unwrap_err().code, ErrorCode.ALREADY_PROCESSED)
        self.optician.refresh_from_db()
        self.assertEqual(self.optician.loyalty_points, 250)

    def test_out_of_stock_at_approval_changes_nothing(self):
        self.frame.stock_qty = 0
        self.frame.save()

        result = RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(result.unwrap_err().code, ErrorCode.INSUFFICIENT_STOCK)
        self.redemption.refresh_from_db()
        self.optician.refresh_from_db()
        self.assertEqual(self.redemption.status, RedemptionStatus.PENDING)
        self.assertEqual(self.optician.loyalty_points, 500)
        self.assertFalse(LoyaltyPointsTransaction.objects.exists())
        self.assertEqual(self.notifier.optician_messages, [])

    def test_balance_spent_elsewhere_blocks_approval(self):
        self.optician.loyalty_points = 100
        self.optician.save()

        result = RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(result.unwrap_err().code, ErrorCode.INSUFFICIENT_POINTS)
        self.redemption.refresh_from_db()
        self.assertEqual(self.redemption.status, RedemptionStatus.PENDING)

    def test_rejection_keeps_balance_and_records_reason(self):
        result = RedemptionService.reject_redemption(self.redemption.pk, ADMIN, "Out of season", notifier=self.notifier)

        redemption = result.unwrap()
        self.assertEqual(redemption.status, RedemptionStatus.REJECTED)
        self.assertEqual(redemption.rejection_reason, "Out of season")
        self.assertEqual(redemption.rejected_by, ADMIN)
        self.optician.refresh_from_db()
        self.assertEqual(self.optician.loyalty_points, 500)

    def test_rejection_default_reason(self):
        redemption = RedemptionService.reject_redemption(self.redemption.pk, ADMIN, notifier=self.notifier).unwrap()
        self.assertEqual(redemption.rejection_reason, DEFAULT_REJECTION_REASON)

    def test_item_action_applies_to_whole_redemption(self):
        item = self.redemption.items.first()

        result = RedemptionService.approve_item(item.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(result.unwrap().pk, self.redemption.pk)
        self.assertEqual(result.unwrap().status, RedemptionStatus.APPROVED)
        self.assertEqual(
            RedemptionService.reject_item(item.pk, ADMIN, notifier=self.notifier).unwrap_err().code,
            ErrorCode.ALREADY_PROCESSED,
        )

    def test_unknown_ids_not_found(self):
        self.assertEqual(
            RedemptionService.approve_redemption(uuid.uuid4(), ADMIN, notifier=self.notifier).unwrap_err().code,
            ErrorCode.NOT_FOUND,
        )
        self.assertEqual(
            RedemptionService.approve_item(uuid.uuid4(), ADMIN, notifier=self.notifier).unwrap_err().code,
            ErrorCode.NOT_FOUND,
        )

    def test_listing(self):
        other = create_optician(loyalty_points=0)
        create_pending_redemption(other, [(self.kit, 1)])
        RedemptionService.approve_redemption(self.redemption.pk, ADMIN, notifier=self.notifier)

        self.assertEqual(list(RedemptionService.list_for_optician(self.optician)), [self.redemption])
        self.assertEqual(RedemptionService.list_pending().count(), 1)
        self.assertEqual(RedemptionService.list_redemptions().count(), 2)
