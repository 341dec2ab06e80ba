"""
Handover Disputes Engine — Operations
=======================================
"""

DISPUTES_DISPUTE_OPEN = "disputes.dispute.open"
DISPUTES_MESSAGE_ADD = "disputes.message.add"
DISPUTES_SUGGESTION_REQUEST = "disputes.suggestion.request"
DISPUTES_SUGGESTION_ACCEPT = "disputes.suggestion.accept"
DISPUTES_DISPUTE_ESCALATE = "disputes.dispute.escalate"
DISPUTES_DISPUTE_RESOLVE = "disputes.dispute.resolve"
DISPUTES_DISPUTE_GET = "disputes.dispute.get"
