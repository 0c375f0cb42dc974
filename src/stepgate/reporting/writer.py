"""Machine-readable plan output."""

from __future__ import annotations

import json

from stepgate.model import Plan


def plan_to_json(plan: Plan) -> str:
    """Serialize a plan as stable, sorted JSON."""
    return json.dumps(plan.to_dict(), indent=2, sort_keys=True)
