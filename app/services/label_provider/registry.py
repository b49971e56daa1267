"""
Label Provider Registry.

Manages label provider selection and fallback between providers.
"""

from app.services.label_provider.base import LabelProvider, LabelResponse
from app.services.label_provider.huggingface_provider import HuggingFaceLabelProvider
from app.services.label_provider.mock_provider import MockLabelProvider
from app.core.settings import settings
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


KNOWN_PROVIDERS = ("huggingface", "mock")


class LabelProviderRegistry:
    """
    Ordered list of label providers; the first enabled one is used.
    """

    def __init__(self, providers: Optional[List[LabelProvider]] = None):
        self.providers: List[LabelProvider] = []
        if providers is not None:
            self.providers.extend(providers)
        else:
            self._initialize_providers()

    def _initialize_providers(self):
        """Initialize providers from settings."""
        provider_name = settings.LABEL_PROVIDER.strip().lower()
        if provider_name not in KNOWN_PROVIDERS:
            logger.warning(
                f"Unknown LABEL_PROVIDER {settings.LABEL_PROVIDER!r} (expected one of {KNOWN_PROVIDERS}), using mock provider"
            )
            self.providers.append(MockLabelProvider())
            return

        if not settings.AI_ENABLED or provider_name == "mock":
            logger.info("Image labeling disabled or mocked, using mock provider only")
            self.providers.append(MockLabelProvider())
            return

        huggingface_provider = HuggingFaceLabelProvider()
        if huggingface_provider.is_enabled():
            self.providers.append(huggingface_provider)
            logger.info("Hugging Face label provider registered")
        else:
            logger.warning(f"Label provider {settings.LABEL_PROVIDER!r} not available, using mock provider")
            self.providers.append(MockLabelProvider())

    def get_provider(self) -> Optional[LabelProvider]:
        """
        Get the best available label provider.

        Returns:
            First enabled provider, or None if none is available
        """
        for provider in self.providers:
            if provider.is_enabled():
                return provider

        logger.error("No label providers available")
        return None

    def label_image(self, image_url: str) -> LabelResponse:
        """
        Label an image with the first provider that succeeds.

        Returns:
            First successful LabelResponse, otherwise the last failure
        """
        last_response: Optional[LabelResponse] = None
        for provider in self.providers:
            if not provider.is_enabled():
                continue
            name = provider.get_model_info()["name"]
            response = provider.label_image(image_url)
            if response.ok:
                return response
            logger.warning(f"Label provider {name} returned error: {response.error}")
            last_response = response

        if last_response is None:
            last_response = MockLabelProvider(error="No label providers available").label_image(image_url)
        return last_response


# Global registry instance (singleton)
_registry: Optional[LabelProviderRegistry] = None


def get_label_registry() -> LabelProviderRegistry:
    """Get or create the settings-driven registry."""
    global _registry
    if _registry is None:
        _registry = LabelProviderRegistry()
    return _registry


def get_label_provider() -> Optional[LabelProvider]:
    """
    Get the best available label provider.

    Returns:
        First enabled provider, or None if unavailable
    """
    return get_label_registry().get_provider()
