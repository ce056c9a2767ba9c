from messaging_toolkit.admin.aggregator import AdminAggregator
from messaging_toolkit.admin.data_models import GroupAudit, Stats, UserAudit

__all__ = [
    "AdminAggregator",
    "GroupAudit",
    "Stats",
    "UserAudit",
]
