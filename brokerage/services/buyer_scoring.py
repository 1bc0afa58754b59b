import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

# Возраст события, если отметки времени нет
MISSING_AGE_DAYS = 9999

MIN_TOKEN_LENGTH = 3
TOKEN_SAMPLE_SIZE = 80

SYNONYMS = {
    "hewlett-packard": "hp",
    "hpe": "hp",
}
VENDOR_PREFIXES = ["dell", "cisco", "lenovo", "supermicro"]

_TOKEN_SPLIT = re.compile(r"[\s,;/|]+")


def norm(value: str) -> str:
    return str(value).strip().lower()


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def days_since(ts: Optional[datetime], now: datetime) -> int:
    if ts is None:
        return MISSING_AGE_DAYS
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int((now - ts).total_seconds() // 86400)


def lot_tokens(title: Optional[str], items: Iterable = (), sample_size: int = TOKEN_SAMPLE_SIZE) -> List[str]:
    """Токены лота из названия и первых моделей/описаний позиций, с синонимами производителей."""
    parts = []
    if title:
        parts.append(title)
    for i, item in enumerate(items):
        if i >= sample_size:
            break
        if getattr(item, "model", None):
            parts.append(item.model)
        elif getattr(item, "description", None):
            parts.append(item.description)

    tokens = [norm(t) for t in _TOKEN_SPLIT.split(" ".join(parts))]
    tokens = [t for t in tokens if len(t) >= MIN_TOKEN_LENGTH]

    result = []
    for token in tokens:
        result.append(token)
        if token in SYNONYMS:
            result.append(SYNONYMS[token])
        for vendor in VENDOR_PREFIXES:
            if token.startswith(vendor):
                result.append(vendor)
    return list(dict.fromkeys(result))


def buyer_tags(buyer) -> List[str]:
    tags = buyer.tags or []
    # JSON-колонка может хранить строку "dell, server"
    if isinstance(tags, str):
        tags = tags.split(",")
    return [norm(t) for t in tags if str(t).strip()]


def tag_match_count(tags: Iterable[str], tokens: Iterable[str]) -> int:
    return len(set(tags) & set(tokens))


def conversion_rate(buyer) -> Optional[float]:
    if buyer.award_conversion_rate is not None:
        return float(buyer.award_conversion_rate)
    wins = buyer.lots_won_count or 0
    if wins > 0:
        return (buyer.po_lots_count or 0) / wins
    return None


def score(buyer, tokens: Iterable[str], now: Optional[datetime] = None) -> Tuple[float, int]:
    now = now or datetime.now(timezone.utc)
    match_count = tag_match_count(buyer_tags(buyer), tokens)

    wins = buyer.lots_won_count or 0
    po_lots = buyer.po_lots_count or 0
    po_uploads = buyer.pos_received_count or 0

    tag_score = match_count * 100
    credit_score = 50 if buyer.credit_ok else -30
    reliability_score = clamp(float(buyer.reliability_score or 0), 0, 5) * 8
    wins_score = clamp(wins, 0, 200) * 2
    po_score = clamp(po_lots, 0, 200) * 4 + clamp(po_uploads, 0, 200) * 1

    if buyer.avg_hours_to_po is None:
        time_score = 0
    else:
        time_score = clamp(50 - float(buyer.avg_hours_to_po), 0, 50)

    age = min(days_since(buyer.last_po_at, now), days_since(buyer.last_win_at, now))
    recency_score = clamp(30 - age, 0, 30)

    conv_score = 0.0
    conv = conversion_rate(buyer)
    if conv is not None:
        c = clamp(conv, 0, 1)
        conv_score = c * 220 if wins >= 3 else c * 90
        if wins >= 5 and c < 0.4:
            conv_score -= 60
        if wins >= 5 and c < 0.2:
            conv_score -= 80

    total = (
        tag_score + credit_score + reliability_score + wins_score
        + po_score + time_score + recency_score + conv_score
    )
    return float(total), match_count


def rank_buyers(buyers: Iterable, tokens: Iterable[str], limit: Optional[int] = None,
                now: Optional[datetime] = None) -> List[Tuple[object, float, int]]:
    """Покупатели с совпадением тегов, по убыванию балла; при равенстве по id."""
    now = now or datetime.now(timezone.utc)
    token_set = set(tokens)
    ranked = []
    for buyer in buyers:
        total, match_count = score(buyer, token_set, now)
        if match_count == 0:
            continue
        ranked.append((buyer, total, match_count))
    ranked.sort(key=lambda row: (-row[1], row[0].id))
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
