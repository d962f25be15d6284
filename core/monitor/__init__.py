"""Score-host service monitor."""

from core.monitor.config import MonitorConfig
from core.monitor.service_monitor import ServiceMonitor
from core.monitor.transport import StatusTransport

__all__ = ["MonitorConfig", "ServiceMonitor", "StatusTransport"]
