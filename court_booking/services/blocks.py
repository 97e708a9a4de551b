"""
Block merge/split engine.

Keeps a user's selection as a list of Blocks, each a maximal run of
adjacent half-hour slots of one court on one day.  Every toggle returns a
new list in normal form: no two blocks of the same court and day touch,
and blocks are ordered by (date, court, start).

Algorithm for ``toggle_slot``:

1. Look the slot up by its natural key (court, date, start).
2. Found → remove it from its block and regroup what is left of that block
   into maximal contiguous runs (zero, one or two new blocks).
3. Not found → collect every block of the same court and day holding a
   slot adjacent to the new one, and merge them with the slot into a single
   block.  A slot between two blocks bridges them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from court_booking.models import Block, Slot
from court_booking.services.pricing import sum_prices

logger = logging.getLogger(__name__)


def is_adjacent(a: Slot, b: Slot) -> bool:
    """Same court and day, and one slot ends exactly where the other starts."""
    if a.court_id != b.court_id or a.date != b.date:
        return False
    return a.ends_at == b.starts_at or b.ends_at == a.starts_at


def group_contiguous(slots: Iterable[Slot]) -> list[list[Slot]]:
    """Split slots into maximal runs of adjacent slots, in chronological order."""
    sorted_slots = sorted(slots, key=lambda s: s.starts_at)
    if not sorted_slots:
        return []

    groups: list[list[Slot]] = []
    current_group = [sorted_slots[0]]

    for slot in sorted_slots[1:]:
        if is_adjacent(current_group[-1], slot):
            current_group.append(slot)
        else:
            groups.append(current_group)
            current_group = [slot]

    groups.append(current_group)
    return groups


def merge_slots_to_block(slots: Iterable[Slot], court_name: str) -> Block:
    """
    Build a Block from a contiguous set of slots of one court and day.

    Raises ValueError for an empty, mixed or gapped slot set.
    """
    sorted_slots = sorted(slots, key=lambda s: s.starts_at)
    if not sorted_slots:
        raise ValueError("Cannot merge empty slot group")

    first, last = sorted_slots[0], sorted_slots[-1]
    for previous, slot in zip(sorted_slots, sorted_slots[1:]):
        if (slot.court_id, slot.date) != (first.court_id, first.date):
            raise ValueError("Cannot merge slots of different courts or days")
        if not is_adjacent(previous, slot):
            raise ValueError(
                f"Cannot merge non-contiguous slots ({previous.ends_at:%H:%M} → {slot.starts_at:%H:%M})"
            )

    return Block(
        court_id=first.court_id,
        court_name=court_name,
        date=first.date,
        start=first.starts_at.strftime("%H:%M"),
        end=last.ends_at.strftime("%H:%M"),
        slots=sorted_slots,
        total_price=sum_prices(s.price or 0 for s in sorted_slots),
    )


def _block_order(block: Block) -> tuple:
    return (block.date, block.court_id, block.slots[0].starts_at)


def _normalized(blocks: Iterable[Block]) -> list[Block]:
    return sorted(blocks, key=_block_order)


def find_block(blocks: Sequence[Block], slot: Slot) -> Block | None:
    """Block holding a slot with the same natural key, if any."""
    for block in blocks:
        if block.court_id != slot.court_id or block.date != slot.date:
            continue
        if any(s.key == slot.key for s in block.slots):
            return block
    return None


def is_selected(blocks: Sequence[Block], slot: Slot) -> bool:
    return find_block(blocks, slot) is not None


def _deselect(blocks: list[Block], owner: Block, slot: Slot) -> list[Block]:
    remaining = [s for s in owner.slots if s.key != slot.key]
    result = [b for b in blocks if b is not owner]
    # An emptied block just disappears.
    for run in group_contiguous(remaining):
        result.append(merge_slots_to_block(run, owner.court_name))
    logger.debug(
        "Deselected %s %s %s: block %s-%s → %d block(s)",
        slot.court_id, slot.date, slot.starts_at.strftime("%H:%M"),
        owner.start, owner.end, len(result) - len(blocks) + 1,
    )
    return result


def _select(blocks: list[Block], slot: Slot, court_name: str) -> list[Block]:
    absorbed = [
        b for b in blocks
        if b.court_id == slot.court_id
        and b.date == slot.date
        and any(is_adjacent(s, slot) for s in b.slots)
    ]
    untouched = [b for b in blocks if not any(b is a for a in absorbed)]

    union = [slot]
    for block in absorbed:
        union.extend(block.slots)
    merged = merge_slots_to_block(union, court_name)
    logger.debug(
        "Selected %s %s %s: merged %d block(s) into %s-%s",
        slot.court_id, slot.date, slot.starts_at.strftime("%H:%M"),
        len(absorbed), merged.start, merged.end,
    )
    return [*untouched, merged]


def toggle_slot(blocks: Sequence[Block], slot: Slot, court_name: str) -> list[Block]:
    """
    Select or deselect *slot* and return the new block list.

    Busy or unpriced slots are rejected: the blocks come back unchanged.
    Blocks of other courts or days are never modified.
    """
    current = list(blocks)
    if not slot.is_selectable:
        logger.warning(
            "Rejected toggle of %s slot %s %s %s",
            "busy" if slot.is_busy else "unpriced",
            slot.court_id, slot.date, slot.starts_at.strftime("%H:%M"),
        )
        return _normalized(current)

    owner = find_block(current, slot)
    if owner is not None:
        return _normalized(_deselect(current, owner, slot))
    return _normalized(_select(current, slot, court_name))


def selection_total(blocks: Iterable[Block]) -> float:
    """Total price of all selected blocks."""
    return sum_prices(b.total_price for b in blocks)
