"""
Hugging Face Label Provider - generic image classification over HTTP.

Downloads the image and posts the bytes to the Hugging Face inference API.
Any failure (download, HTTP, timeout, malformed payload) is returned as an
error response so classification falls back instead of crashing.
"""

from app.core.settings import settings
from app.models.classification import LabelPrediction
from app.services.label_provider.base import LabelProvider, LabelResponse
from datetime import datetime, timezone
from typing import Dict, List, Optional
from pydantic import ValidationError
import logging
import requests

logger = logging.getLogger(__name__)


class HuggingFaceLabelProvider(LabelProvider):
    """
    Image classifier backed by the Hugging Face inference API.

    Public models work without a token; HUGGINGFACE_API_TOKEN is sent when set.
    """

    MODEL_VERSION = "inference-api"

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.model_name = model_name or settings.LABEL_MODEL_NAME
        self.api_url = (api_url or settings.HUGGINGFACE_API_URL).rstrip("/")
        self.api_token = api_token if api_token is not None else settings.HUGGINGFACE_API_TOKEN
        self.timeout_seconds = timeout_seconds or settings.AI_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.enabled = settings.AI_ENABLED

        if self.enabled:
            logger.info(f"Hugging Face label provider initialized: {self.model_name}")
        else:
            logger.info("Hugging Face label provider disabled (AI_ENABLED=false)")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.model_name,
            "version": self.MODEL_VERSION
        }

    def get_timeout_seconds(self) -> float:
        return self.timeout_seconds

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/{self.model_name}"

    def label_image(self, image_url: str) -> LabelResponse:
        """
        Label an image by URL. Never raises.
        """
        if not self.enabled:
            return self._error_response("Hugging Face provider disabled")

        try:
            image_bytes = self._download_image(image_url)
            logger.info(f"Image downloaded, size: {len(image_bytes)} bytes")
            payload = self._call_inference_api(image_bytes)
            labels = self._parse_predictions(payload)
        except requests.RequestException as e:
            logger.warning(f"Hugging Face labeling failed: {e}")
            return self._error_response(f"Labeling request failed: {e}")
        except (ValueError, ValidationError) as e:
            logger.warning(f"Hugging Face returned an unusable payload: {e}")
            return self._error_response(f"Invalid labeling response: {e}")

        logger.info(f"Received {len(labels)} labels from {self.model_name}")
        return LabelResponse(
            labels=labels,
            model_name=self.model_name,
            inference_timestamp=datetime.now(timezone.utc),
        )

    def _download_image(self, image_url: str) -> bytes:
        response = self.session.get(image_url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.content

    def _call_inference_api(self, image_bytes: bytes):
        headers = {"Content-Type": "application/octet-stream"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        response = self.session.post(
            self.endpoint,
            data=image_bytes,
            headers=headers,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    def _parse_predictions(self, payload) -> List[LabelPrediction]:
        """Parse [{label, score}, ...]; the API's ranking is kept as-is."""
        if isinstance(payload, dict) and "error" in payload:
            raise ValueError(f"Inference API error: {payload['error']}")
        if not isinstance(payload, list):
            raise ValueError(f"Expected a list of predictions, got {type(payload).__name__}")
        return [LabelPrediction.model_validate(item) for item in payload]

    def _error_response(self, error: str) -> LabelResponse:
        return LabelResponse(
            labels=None,
            model_name=self.model_name,
            inference_timestamp=datetime.now(timezone.utc),
            error=error,
        )
