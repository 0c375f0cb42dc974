"""Rendering of plans and decisions for the pipeline driver."""

from .stdout import PlanReporter, render_decision
from .writer import plan_to_json

__all__ = ["PlanReporter", "plan_to_json", "render_decision"]
