"""
Row pairing for plan tables.

Rows of a prompt-side section (e.g. questions) are linked to rows of a
value-side section (e.g. outcomes) through an opaque pair id. The id is a
weak link: rows never own each other, and grouping is recomputed from the
ids whenever it is needed.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import uuid

from .models import PAIRINGS, PlanRow, PlanTable, SectionPairing, clone_row, clone_table
from .bounds import compute_section_bounds


def create_pair_id(prefix: str = "pair") -> str:
    """Create a unique pair id for linking rows together."""
    return f"{prefix}-{uuid.uuid4()}"


def _fill_down(rows: List[PlanRow], section: range) -> None:
    """Propagate the last seen pair id through unset rows of a section."""
    last_pair_id = None
    for idx in section:
        if idx >= len(rows):
            break
        row = rows[idx]
        if row.pair_id:
            last_pair_id = row.pair_id
        elif last_pair_id:
            row.pair_id = last_pair_id


def ensure_pairing(
    rows: Sequence[PlanRow],
    primary: range,
    secondary: range,
    prefix: str = "pair",
) -> List[PlanRow]:
    """
    Make sure index-aligned rows of two sections share a pair id.

    For each aligned (primary, secondary) pair over the overlapping length:
    neither row has an id -> both get a new one; exactly one has an id -> it
    is copied to the other; both have different ids -> left alone, since an
    explicit user pairing wins over positional defaults. Afterwards each
    section's last seen id is filled down through its unset rows.

    Running this on an already paired table changes nothing.

    Args:
        rows: Table rows (not modified)
        primary: Absolute row range of the primary section
        secondary: Absolute row range of the secondary section
        prefix: Prefix for newly generated ids

    Returns:
        New list of rows with pairing applied
    """
    result = [clone_row(r) for r in rows]

    for offset in range(min(len(primary), len(secondary))):
        p_idx = primary.start + offset
        s_idx = secondary.start + offset
        if p_idx >= len(result) or s_idx >= len(result):
            continue
        primary_row = result[p_idx]
        secondary_row = result[s_idx]

        if primary_row.pair_id and secondary_row.pair_id and primary_row.pair_id != secondary_row.pair_id:
            continue

        pair_id = primary_row.pair_id or secondary_row.pair_id or create_pair_id(prefix)
        primary_row.pair_id = pair_id
        secondary_row.pair_id = pair_id

    _fill_down(result, primary)
    _fill_down(result, secondary)
    return result


def ensure_plan_pairing(table: PlanTable) -> PlanTable:
    """Apply ensure_pairing to every section pairing of a plan table."""
    bounds = compute_section_bounds(table.counts)
    result = clone_table(table)
    for pairing in PAIRINGS:
        result.rows = ensure_pairing(
            result.rows,
            bounds[pairing.primary],
            bounds[pairing.secondary],
            prefix=pairing.prefix,
        )
    return result


# -------------------------------------------------------------------------
# Grouping
# -------------------------------------------------------------------------

@dataclass
class PairEntry:
    """A row taking part in grouping, identified by its absolute index."""
    index: int
    row: PlanRow

    @property
    def pair_id(self) -> Optional[str]:
        return self.row.pair_id


@dataclass
class PairedGroup:
    """One primary entry with the secondary entries attached to it."""
    primary: PairEntry
    secondary: List[PairEntry] = field(default_factory=list)


@dataclass
class PairedGroups:
    """
    Result of build_paired_groups.

    Every secondary entry appears in exactly one group or in leftover_secondary.
    """
    pairs: List[PairedGroup] = field(default_factory=list)
    leftover_primary: List[PairEntry] = field(default_factory=list)
    leftover_secondary: List[PairEntry] = field(default_factory=list)


def build_paired_groups(
    primary_entries: Sequence[PairEntry],
    secondary_entries: Sequence[PairEntry],
) -> PairedGroups:
    """
    Group secondary entries under the primary entries they are paired with.

    Secondary entries are grouped by pair id; entries without an id go to a
    fallback pool. Walking the primary entries in order, a primary whose id
    matches a remaining group takes that whole group; otherwise it takes the
    head of the fallback pool as a one-element group; otherwise it is a
    leftover primary. Secondary entries never consumed are returned as
    leftover secondary, in their original relative order.
    """
    grouped: Dict[str, List[PairEntry]] = {}
    fallback: List[PairEntry] = []
    order = {id(entry): pos for pos, entry in enumerate(secondary_entries)}

    for entry in secondary_entries:
        if entry.pair_id:
            grouped.setdefault(entry.pair_id, []).append(entry)
        else:
            fallback.append(entry)

    result = PairedGroups()
    for entry in primary_entries:
        if entry.pair_id and grouped.get(entry.pair_id):
            result.pairs.append(PairedGroup(primary=entry, secondary=grouped.pop(entry.pair_id)))
        elif fallback:
            result.pairs.append(PairedGroup(primary=entry, secondary=[fallback.pop(0)]))
        else:
            result.leftover_primary.append(entry)

    leftovers = fallback + [e for group in grouped.values() for e in group]
    result.leftover_secondary = sorted(leftovers, key=lambda e: order[id(e)])
    return result


def paired_groups_for(table: PlanTable, pairing: SectionPairing) -> PairedGroups:
    """Build paired groups from the two sections of a pairing in a table."""
    bounds = compute_section_bounds(table.counts)

    def entries(section_range: range) -> List[PairEntry]:
        return [PairEntry(idx, table.rows[idx]) for idx in section_range if idx < len(table.rows)]

    return build_paired_groups(entries(bounds[pairing.primary]), entries(bounds[pairing.secondary]))
