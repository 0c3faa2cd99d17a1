from cronguard.models.monitor import Monitor
from cronguard.models.ping import Ping

__all__ = ["Monitor", "Ping"]
