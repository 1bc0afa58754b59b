"""Tests for the line-by-line allocation engine."""

from datetime import datetime, timedelta, timezone

from brokerage.models.lots import LineItem
from brokerage.models.offers import Offer
from brokerage.schemas.allocation import OfferLineView
from brokerage.services.allocation import best_take_all, compute_allocation, winner_key

T0 = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def items(*qtys):
    return [LineItem(id=i, lot_id=1, qty=qty) for i, qty in enumerate(qtys, start=1)]


def bid(offer_line_id, buyer_id, line_item_id, unit_price, created_at=T0, qty_snapshot=None):
    return OfferLineView(
        offer_line_id=offer_line_id,
        offer_id=buyer_id,
        buyer_id=buyer_id,
        line_item_id=line_item_id,
        unit_price=unit_price,
        qty_snapshot=qty_snapshot,
        offer_created_at=created_at,
    )


def winners(result):
    return {line.line_item_id: line.best.buyer_id for line in result.lines if line.best}


class TestBestLine:
    def test_two_buyers_split(self):
        offer_lines = [
            bid(1, 1, 1, 100), bid(2, 1, 2, 50),
            bid(3, 2, 1, 90), bid(4, 2, 2, 60),
        ]
        result = compute_allocation(items(1, 1), offer_lines)
        assert winners(result) == {1: 1, 2: 2}
        assert {b.buyer_id: b.total for b in result.buyers} == {1: 100.0, 2: 60.0}
        assert result.priced_lines == 2
        assert result.total_lines == 2
        assert result.split_total == 160.0

    def test_buyers_sorted_by_total(self):
        offer_lines = [bid(1, 1, 1, 10), bid(2, 2, 2, 500)]
        result = compute_allocation(items(1, 1), offer_lines)
        assert [b.buyer_id for b in result.buyers] == [2, 1]

    def test_extended_uses_qty_snapshot(self):
        result = compute_allocation(items(5), [bid(1, 1, 1, 10, qty_snapshot=3)])
        line = result.lines[0]
        assert line.qty == 3
        assert line.extended == 30.0

    def test_extended_falls_back_to_item_qty(self):
        result = compute_allocation(items(5), [bid(1, 1, 1, 10)])
        assert result.lines[0].extended == 50.0

    def test_top_n(self):
        offer_lines = [bid(i, i, 1, 10 * i) for i in range(1, 6)]
        result = compute_allocation(items(1), offer_lines, top_n=2)
        assert [row.buyer_id for row in result.lines[0].top] == [5, 4]

    def test_buyer_line_ids(self):
        offer_lines = [bid(1, 7, 1, 10), bid(2, 7, 2, 10)]
        result = compute_allocation(items(1, 1), offer_lines)
        assert result.buyers[0].line_item_ids == [1, 2]
        assert result.buyers[0].line_count == 2


class TestTieBreak:
    def test_earliest_offer_wins(self):
        offer_lines = [
            bid(1, 1, 1, 100, created_at=T0 + timedelta(minutes=5)),
            bid(2, 2, 1, 100, created_at=T0),
        ]
        assert winners(compute_allocation(items(1), offer_lines)) == {1: 2}

    def test_same_time_lower_buyer_id_wins(self):
        offer_lines = [bid(1, 9, 1, 100), bid(2, 3, 1, 100)]
        assert winners(compute_allocation(items(1), offer_lines)) == {1: 3}

    def test_independent_of_input_order(self):
        offer_lines = [bid(1, 9, 1, 100), bid(2, 3, 1, 100), bid(3, 5, 1, 99)]
        forward = compute_allocation(items(1), offer_lines)
        backward = compute_allocation(items(1), list(reversed(offer_lines)))
        assert forward == backward

    def test_naive_timestamps_are_utc(self):
        naive = bid(1, 1, 1, 100, created_at=datetime(2026, 10, 1, 11, 0))
        aware = bid(2, 2, 1, 100, created_at=T0)
        assert winner_key(naive) < winner_key(aware)


class TestProperties:
    def test_idempotent(self):
        offer_lines = [bid(1, 1, 1, 100), bid(2, 2, 1, 90), bid(3, 2, 2, 40)]
        first = compute_allocation(items(2, 3), offer_lines)
        second = compute_allocation(items(2, 3), offer_lines)
        assert first.model_dump() == second.model_dump()

    def test_higher_bid_changes_only_that_line(self):
        offer_lines = [bid(1, 1, 1, 100), bid(2, 1, 2, 50), bid(3, 2, 2, 60)]
        before = winners(compute_allocation(items(1, 1), offer_lines))
        after = winners(compute_allocation(items(1, 1), offer_lines + [bid(4, 3, 1, 150)]))
        assert before == {1: 1, 2: 2}
        assert after == {1: 3, 2: 2}

    def test_input_not_mutated(self):
        offer_lines = [bid(1, 1, 1, 100), bid(2, 2, 1, 90)]
        snapshot = [line.model_dump() for line in offer_lines]
        compute_allocation(items(1), offer_lines)
        assert [line.model_dump() for line in offer_lines] == snapshot
        assert [line.offer_line_id for line in offer_lines] == [1, 2]


class TestMissingOffers:
    def test_no_offers_is_empty_result(self):
        result = compute_allocation(items(1, 1), [])
        assert result.priced_lines == 0
        assert result.total_lines == 2
        assert result.buyers == []
        assert all(line.best is None for line in result.lines)

    def test_partial_coverage(self):
        result = compute_allocation(items(1, 1, 1), [bid(1, 1, 2, 10)])
        assert result.priced_lines == 1
        assert result.total_lines == 3


class TestFilters:
    def test_hide_zero_qty(self):
        result = compute_allocation(items(0, 2), [bid(1, 1, 1, 10)], hide_zero_qty=True)
        assert [line.line_item_id for line in result.lines] == [2]
        assert result.total_lines == 1
        assert result.priced_lines == 0

    def test_hide_no_bids(self):
        result = compute_allocation(items(1, 1), [bid(1, 1, 2, 10)], hide_no_bids=True)
        assert [line.line_item_id for line in result.lines] == [2]
        assert result.total_lines == 1


class TestTakeAll:
    def offer(self, id, buyer_id, total, created_at=T0):
        return Offer(id=id, lot_id=1, buyer_id=buyer_id, take_all_total=total, created_at=created_at)

    def test_highest_total(self):
        offers = [self.offer(1, 1, 500), self.offer(2, 2, 800), Offer(id=3, lot_id=1, buyer_id=3)]
        best = best_take_all(offers)
        assert (best.offer_id, best.buyer_id, best.take_all_total) == (2, 2, 800.0)

    def test_none_without_take_all(self):
        assert best_take_all([Offer(id=1, lot_id=1, buyer_id=1)]) is None

    def test_reported_alongside_split(self):
        result = compute_allocation(items(1), [bid(1, 1, 1, 10)], offers=[self.offer(5, 2, 900)])
        assert result.best_take_all.offer_id == 5
        assert result.split_total == 10.0


class TestCurrencies:
    def test_winning_currencies_reported(self):
        usd = bid(1, 1, 1, 100).model_copy(update={"currency": "USD"})
        eur = bid(2, 2, 2, 80).model_copy(update={"currency": "EUR"})
        losing = bid(3, 3, 2, 10).model_copy(update={"currency": "GBP"})
        result = compute_allocation(items(1, 1), [usd, eur, losing])
        assert result.currencies == ["EUR", "USD"]

    def test_single_currency(self):
        result = compute_allocation(items(1), [bid(1, 1, 1, 100).model_copy(update={"currency": "USD"})])
        assert result.currencies == ["USD"]
