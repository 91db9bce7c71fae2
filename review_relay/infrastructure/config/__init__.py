from .settings import Settings, GoogleSettings, DistributionSettings, get_settings

__all__ = ["Settings", "GoogleSettings", "DistributionSettings", "get_settings"]
