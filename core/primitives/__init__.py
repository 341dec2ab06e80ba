"""
Handover Core Primitives — Shared Domain Records
==================================================
Immutable snapshots shared by every engine:

    order        — Order, OrderLine, DeliveryDetails, ProofOfDelivery
    dispute      — Dispute, DisputeMessage, DisputeResolution
    review       — Review
    notification — Notification
    workflow     — ORDER_WORKFLOW, DISPUTE_WORKFLOW state machines

Pure Python, no Django dependency, no persistence logic.
"""
