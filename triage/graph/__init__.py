"""Triage pipeline graph exports."""

from triage.graph.builder import build_graph, get_graph_app
from triage.graph.state import TriageState

__all__ = ["TriageState", "build_graph", "get_graph_app"]
