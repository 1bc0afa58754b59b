"""Tests for buyer ranking."""

from datetime import datetime, timedelta, timezone

from brokerage.models.buyers import Buyer
from brokerage.models.lots import LineItem
from brokerage.schemas.buyers import Buyer as BuyerSchema
from brokerage.services.buyer_scoring import buyer_tags, lot_tokens, rank_buyers, score

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


def buyer(id, tags, **fields):
    fields.setdefault("credit_ok", False)
    return Buyer(id=id, name=f"Buyer {id}", tags=tags, **fields)


class TestLotTokens:
    def test_title_and_models(self):
        items = [LineItem(id=1, model="R740"), LineItem(id=2, description="PowerEdge chassis")]
        tokens = lot_tokens("Dell servers", items)
        assert "dell" in tokens
        assert "servers" in tokens
        assert "r740" in tokens
        assert "poweredge" in tokens

    def test_short_tokens_dropped_and_deduplicated(self):
        tokens = lot_tokens("HP hp DL380 DL380", [])
        assert "hp" not in tokens
        assert tokens.count("dl380") == 1

    def test_synonyms(self):
        assert "hp" in lot_tokens("HPE ProLiant", [])
        assert "dell" in lot_tokens("DellEMC Unity", [])

    def test_sample_size(self):
        items = [LineItem(id=i, model=f"model{i}") for i in range(5)]
        tokens = lot_tokens(None, items, sample_size=2)
        assert tokens == ["model0", "model1"]


class TestScore:
    def test_tag_matches(self):
        total, matches = score(buyer(1, ["Dell", "server"]), {"dell", "r740", "server"}, NOW)
        assert matches == 2
        # 200 за теги, -30 без кредита
        assert total == 170.0

    def test_is_deterministic(self):
        b = buyer(1, ["dell"], reliability_score=4, lots_won_count=6, po_lots_count=3,
                  last_win_at=NOW - timedelta(days=10))
        assert score(b, {"dell"}, NOW) == score(b, {"dell"}, NOW)

    def test_full_formula(self):
        b = buyer(
            1, ["dell"],
            credit_ok=True,
            reliability_score=9,      # clamp до 5 -> 40
            lots_won_count=5,         # 10
            po_lots_count=1,          # 4
            pos_received_count=2,     # 2
            avg_hours_to_po=20,       # 30
            last_po_at=NOW - timedelta(days=10),  # 20
        )
        # конверсия 1/5 = 0.2: 0.2 * 220 - 60 = -16
        total, _ = score(b, {"dell"}, NOW)
        assert total == 100 + 50 + 40 + 10 + 4 + 2 + 30 + 20 - 16

    def test_low_conversion_double_penalty(self):
        b = buyer(1, ["dell"], lots_won_count=10, award_conversion_rate=0.1)
        total, _ = score(b, {"dell"}, NOW)
        assert total == 100 - 30 + 20 + 0.1 * 220 - 60 - 80

    def test_conversion_with_few_wins(self):
        b = buyer(1, ["dell"], lots_won_count=2, award_conversion_rate=0.5)
        total, _ = score(b, {"dell"}, NOW)
        assert total == 100 - 30 + 4 + 45

    def test_missing_timestamps_give_no_recency(self):
        b = buyer(1, ["dell"], credit_ok=True)
        assert score(b, {"dell"}, NOW)[0] == 150.0


class TestRankBuyers:
    def test_excludes_non_matching(self):
        ranked = rank_buyers([buyer(1, ["dell", "server"]), buyer(2, ["cisco"])], {"dell", "r740", "server"}, now=NOW)
        assert [b.id for b, _, _ in ranked] == [1]
        assert ranked[0][2] == 2

    def test_sorted_by_score_then_id(self):
        buyers = [
            buyer(3, ["dell"]),
            buyer(1, ["dell"]),
            buyer(2, ["dell"], credit_ok=True),
        ]
        ranked = rank_buyers(buyers, {"dell"}, now=NOW)
        assert [b.id for b, _, _ in ranked] == [2, 1, 3]

    def test_limit(self):
        buyers = [buyer(i, ["dell"]) for i in range(1, 6)]
        assert len(rank_buyers(buyers, {"dell"}, limit=2, now=NOW)) == 2

    def test_no_tags(self):
        assert rank_buyers([buyer(1, None)], {"dell"}, now=NOW) == []

    def test_string_tags(self):
        ranked = rank_buyers([buyer(1, "Dell, server"), buyer(2, "cisco")], {"dell", "server"}, now=NOW)
        assert [(b.id, matches) for b, _, matches in ranked] == [(1, 2)]


class TestBuyerTags:
    def test_list(self):
        assert buyer_tags(buyer(1, [" Dell ", "SERVER"])) == ["dell", "server"]

    def test_comma_separated_string(self):
        assert buyer_tags(buyer(1, "dell,  hp ,")) == ["dell", "hp"]

    def test_schema_accepts_string(self):
        schema = BuyerSchema.model_validate(buyer(
            1, "dell, hp", lots_won_count=0, po_lots_count=0, pos_received_count=0,
            is_active=True, do_not_invite=False,
        ))
        assert schema.tags == ["dell", "hp"]
