"""SQLAlchemy models."""
from brandportal.backend.models.user import User
from brandportal.backend.models.site_setting import SiteSetting
from brandportal.backend.models.site_content import SiteContent
from brandportal.backend.models.activity_event import ActivityEvent

__all__ = [
    "User",
    "SiteSetting",
    "SiteContent",
    "ActivityEvent",
]
