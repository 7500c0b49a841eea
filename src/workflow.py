"""LangGraph workflow definition for delivery confirmation.

The graph is linear. A fatal step sets final_status="error" and every later
node passes through, so the report node always runs.
"""
from langgraph.graph import StateGraph, END

from src.core.workflow_state import DeliveryWorkflowState
from src.nodes.upload import UploadPhotoNode, UploadSignatureNode
from src.nodes.record_pod import RecordPODNode
from src.nodes.update_order import UpdateOrderNode
from src.nodes.notify import NotifyNode
from src.nodes.report import ReportNode


def build_graph(
    upload_photo_node: UploadPhotoNode,
    upload_signature_node: UploadSignatureNode,
    record_pod_node: RecordPODNode,
    update_order_node: UpdateOrderNode,
    notify_node: NotifyNode,
    report_node: ReportNode,
):
    """Build and compile the delivery workflow graph.

    Graph structure:
        upload_photo → upload_signature → record_pod → update_order → notify → report

    Returns a compiled LangGraph that can be invoked with a DeliveryWorkflowState.
    """
    graph = StateGraph(DeliveryWorkflowState)

    nodes = [
        upload_photo_node,
        upload_signature_node,
        record_pod_node,
        update_order_node,
        notify_node,
        report_node,
    ]
    for node in nodes:
        graph.add_node(node.name, node)

    graph.set_entry_point(nodes[0].name)
    for current, following in zip(nodes, nodes[1:]):
        graph.add_edge(current.name, following.name)
    graph.add_edge(report_node.name, END)

    return graph.compile()
