from gaming_dashboard.config.loader import load_settings
from gaming_dashboard.config.schema import DashboardSettings

__all__ = ["DashboardSettings", "load_settings"]
