from typing import Any, Iterable, Optional
from brokerage.core.errors import ValidationError
from brokerage.core.logging_config import logger
from brokerage.schemas.offers import (
    LinePrice,
    NormalizedLine,
    NormalizedOffer,
    PerComponentPayload,
    PerLinePayload,
    TakeAllPayload,
)

COMPONENT_KEYS = ["cpu", "memory", "network", "expansion", "gpu", "drives"]


def parse_money(value: Any) -> Optional[float]:
    """Разбирает цену из формы: "1,200.50" -> 1200.5, пустое/мусор -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _specs(item) -> dict:
    specs = getattr(item, "specs", None)
    return specs if isinstance(specs, dict) else {}


def _spec_int(item, key: str) -> Optional[int]:
    value = _specs(item).get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    return None


def component_qty(item, key: str) -> int:
    if key == "cpu":
        return item.cpu_qty or 1
    if key == "memory":
        return item.memory_qty or 1
    if key == "drives":
        return _spec_int(item, "drives_qty") or 1
    if key == "gpu":
        return _spec_int(item, "gpu_qty") or 1
    return 1


def has_component(item, key: str) -> bool:
    if key == "cpu":
        return bool(item.cpu)
    if key == "memory":
        return bool(item.memory_part_numbers or item.memory_qty)
    if key == "network":
        return bool(item.network_card)
    if key == "expansion":
        return bool(item.expansion_card)
    if key == "gpu":
        return bool(item.gpu)
    if key == "drives":
        specs = _specs(item)
        return bool(specs.get("drives") or specs.get("drives_qty"))
    return False


def component_total(item, components: dict) -> float:
    total = 0.0
    for key in COMPONENT_KEYS:
        component = components.get(key)
        if component is None or not component.selected:
            continue
        if not has_component(item, key):
            continue
        price = parse_money(component.price)
        if price is None or price < 0:
            continue
        total += price * component_qty(item, key)
    return total


def line_unit_price(item, components: dict, manual_price: Any) -> Optional[float]:
    """Цена единицы: сумма по компонентам, иначе ручная цена, иначе None."""
    comp_total = component_total(item, components)
    if comp_total > 0:
        return comp_total
    manual = parse_money(manual_price)
    if manual is None or manual < 0:
        return None
    return manual


def normalize_offer(payload, line_items: Iterable, lot_currency: Optional[str] = None) -> NormalizedOffer:
    items_by_id = {item.id: item for item in line_items}

    if isinstance(payload, TakeAllPayload):
        total = parse_money(payload.take_all_total)
        if total is None or total <= 0:
            raise ValidationError("Invalid take-all total", field="take_all_total")
        return NormalizedOffer(take_all_total=total, offer_total=total)

    if not isinstance(payload, (PerLinePayload, PerComponentPayload)):
        raise ValidationError(f"Unsupported offer mode: {getattr(payload, 'mode', None)}", field="mode")

    if not payload.lines:
        raise ValidationError("No line offers provided", field="lines")

    normalized = []
    seen = set()
    for entry in payload.lines:
        item = items_by_id.get(entry.line_item_id)
        if item is None:
            raise ValidationError(
                f"Line item {entry.line_item_id} is not open for bidding in this round",
                field="lines.line_item_id",
            )
        if entry.line_item_id in seen:
            raise ValidationError(f"Line item {entry.line_item_id} priced twice", field="lines.line_item_id")
        seen.add(entry.line_item_id)

        if isinstance(entry, LinePrice):
            unit_price = parse_money(entry.unit_price)
            if unit_price is not None and unit_price < 0:
                unit_price = None
        else:
            unit_price = line_unit_price(item, entry.components, entry.manual_price)

        if unit_price is None:
            logger.debug(f"Line item {entry.line_item_id} has no usable price, excluded")
            continue

        qty = item.qty if item.qty is not None else 1
        normalized.append(NormalizedLine(
            line_item_id=entry.line_item_id,
            unit_price=unit_price,
            qty=qty,
            currency=entry.currency or lot_currency,
        ))

    if not normalized:
        raise ValidationError("No usable line offers (need a non-negative unit price)", field="lines.unit_price")

    offer_total = sum(line.unit_price * line.qty for line in normalized)
    return NormalizedOffer(lines=normalized, take_all_total=None, offer_total=offer_total)
