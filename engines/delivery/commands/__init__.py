"""
Handover Delivery Engine — Operations
=======================================
"""

DELIVERY_DRIVER_ASSIGN = "delivery.driver.assign"
DELIVERY_CONTEXT_DESCRIBE = "delivery.context.describe"
DELIVERY_ASSISTANT_ASK = "delivery.assistant.ask"
