from langgraph.graph import END, START, StateGraph

from triage.graph.nodes import (
    assemble_node,
    care_plan_node,
    classify_node,
    rationale_node,
)
from triage.graph.state import TriageState


def build_graph():
    graph = StateGraph(TriageState)

    # --- nodes ---
    graph.add_node("classify", classify_node)
    graph.add_node("care_plan", care_plan_node)
    graph.add_node("rationale", rationale_node)
    graph.add_node("assemble", assemble_node)

    # --- edges ---
    graph.add_edge(START, "classify")

    # Plan and rationale fan out from the single classification
    graph.add_edge("classify", "care_plan")
    graph.add_edge("classify", "rationale")

    # Assemble waits for both branches
    graph.add_edge(["care_plan", "rationale"], "assemble")
    graph.add_edge("assemble", END)

    return graph.compile()


# Lazy singleton
_app = None


def get_graph_app():
    global _app
    if _app is None:
        _app = build_graph()
    return _app
