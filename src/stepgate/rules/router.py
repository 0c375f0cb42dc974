"""Change-type to step-list routing."""

from __future__ import annotations

from collections.abc import Mapping

from stepgate.constants.change_types import DEFAULT_ROUTING_TABLE, ROUTING_FALLBACK_TYPE


def steps_for(
    change_type: str,
    table: Mapping[str, tuple[str, ...]] = DEFAULT_ROUTING_TABLE,
) -> tuple[str, ...]:
    """Return the ordered steps required for *change_type*.

    Unknown change types get the ``feat`` list, which is the full pipeline.
    """
    steps = table.get(change_type)
    if steps is None:
        steps = table.get(ROUTING_FALLBACK_TYPE, DEFAULT_ROUTING_TABLE[ROUTING_FALLBACK_TYPE])
    return tuple(steps)


def full_step_list(table: Mapping[str, tuple[str, ...]] = DEFAULT_ROUTING_TABLE) -> tuple[str, ...]:
    """Every step named anywhere in *table*, fallback entry first."""
    ordered: dict[str, None] = dict.fromkeys(steps_for(ROUTING_FALLBACK_TYPE, table))
    for steps in table.values():
        ordered.update(dict.fromkeys(steps))
    return tuple(ordered)
