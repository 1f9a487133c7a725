"""
Shelfarr v1.0.0 - Exceptions
Domain errors raised by the organization services
"""


class ShelfarrError(Exception):
    """Base class for Shelfarr errors"""


class RuleNotFoundError(ShelfarrError):
    """Organization rule does not exist"""

    def __init__(self, rule_id: str):
        super().__init__(f"Organization rule not found: {rule_id}")
        self.rule_id = rule_id


class QueueItemNotFoundError(ShelfarrError):
    """Organize queue item does not exist"""

    def __init__(self, item_id: str):
        super().__init__("Queue item not found")
        self.item_id = item_id


class InvalidTemplateError(ShelfarrError, ValueError):
    """Naming template failed validation"""


class InvalidCronExpressionError(ShelfarrError, ValueError):
    """Schedule expression is not a valid 5-field cron expression"""


class InvalidQueueItemStateError(ShelfarrError):
    """Queue item is not in a state that allows the action"""

    reason = "Invalid queue item state"

    def __init__(self, item_id: str, status: str, action: str):
        super().__init__(f"Queue item is {status} and cannot be {action}")
        self.item_id = item_id
        self.status = status
