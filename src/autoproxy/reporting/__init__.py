"""Output rendering for the CLI."""

from .text import outcome_to_dict, render_outcome, render_probe_results, render_rule_test, to_json

__all__ = ["outcome_to_dict", "render_outcome", "render_probe_results", "render_rule_test", "to_json"]
