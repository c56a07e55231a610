"""Presentation-side state: API client, resource cache, branding, content editor."""
from brandportal.web.api_client import PortalApiClient
from brandportal.web.branding import BrandingPropagator, DocumentState, apply_branding, resolve_logo
from brandportal.web.cache import ResourceCache, Subscription
from brandportal.web.config import WebConfig
from brandportal.web.content_editor import ContentEditor, SaveResult
from brandportal.web.context import PortalContext

__all__ = [
    "PortalApiClient",
    "BrandingPropagator",
    "DocumentState",
    "apply_branding",
    "resolve_logo",
    "ResourceCache",
    "Subscription",
    "WebConfig",
    "ContentEditor",
    "SaveResult",
    "PortalContext",
]
