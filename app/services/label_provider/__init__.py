"""
Image-labeling plug-ins.

Wrap the external image classifier. Providers never raise; a failed call is
reported as "no labels available" so classification can fall back.
"""

from app.services.label_provider.base import LabelProvider, LabelResponse
from app.services.label_provider.huggingface_provider import HuggingFaceLabelProvider
from app.services.label_provider.mock_provider import MockLabelProvider
from app.services.label_provider.registry import LabelProviderRegistry, get_label_provider, get_label_registry

__all__ = [
    "LabelProvider",
    "LabelResponse",
    "HuggingFaceLabelProvider",
    "MockLabelProvider",
    "LabelProviderRegistry",
    "get_label_provider",
    "get_label_registry",
]
