# dronegpt/chat/client.py
"""
HTTP client for an OpenAI-compatible chat-completion endpoint.

One request, one answer: retry policy belongs to the caller.
"""
import json
import logging
from typing import Optional

import requests

from .data_models import CompletionRequest, CompletionResponse
from .exceptions import ModelProtocolError, ModelTransientError
from ..constants.model_api import ModelAPIConstants

logger = logging.getLogger(__name__)


class ModelClient:
    """
    Sends CompletionRequests and returns CompletionResponses.

    Raises ModelTransientError for failures worth another round later
    (timeouts, dropped connections, 429/5xx) and ModelProtocolError for
    everything that will not fix itself.
    """

    def __init__(self, api_key: Optional[str], url: str = ModelAPIConstants.DEFAULT_URL,
                 timeout: float = ModelAPIConstants.DEFAULT_TIMEOUT_S,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})
        else:
            logger.warning("ModelClient created without an API key.")

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        body = json.dumps(request.to_dict())
        logger.debug(f"Sending {len(body):,} bytes to {self.url} ({len(request.messages)} messages)")

        try:
            response = self.session.post(self.url, data=body, timeout=self.timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError,
                requests.exceptions.ChunkedEncodingError) as e:
            logger.error(f"Model request failed in transit: {e}")
            raise ModelTransientError(f"{type(e).__name__}: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Model request could not be sent: {e}")
            raise ModelProtocolError(f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            message = f"Unexpected response {response.reason or ''}".strip()
            logger.error(f"Model endpoint returned HTTP {response.status_code}: {response.text[:200]}")
            if response.status_code in ModelAPIConstants.TRANSIENT_STATUS_CODES:
                raise ModelTransientError(message, status_code=response.status_code)
            raise ModelProtocolError(message, status_code=response.status_code)

        logger.debug(f"Received {len(response.content):,} bytes")
        try:
            return CompletionResponse.from_dict(response.json())
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            logger.error(f"Malformed completion response: {e}")
            raise ModelProtocolError(f"Malformed completion response: {e}") from e
