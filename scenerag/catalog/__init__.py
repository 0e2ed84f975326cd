from .campaigns import CampaignCatalog, CampaignAnalytics
from .videos import VideoCatalog

__all__ = ["CampaignCatalog", "CampaignAnalytics", "VideoCatalog"]
