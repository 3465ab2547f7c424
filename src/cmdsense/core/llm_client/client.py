"""
HTTP client for an OpenAI-compatible chat completion endpoint.

This module sends one system instruction plus one user prompt per request
and returns the text of the first choice. There is no retry: the suggestion
engine falls back to offline heuristics on any failure instead.
"""

from typing import Dict, Any, Optional

import httpx
from loguru import logger

from .exceptions import RemoteConnectionError, RemoteServerError, RemoteTimeoutError, RemoteResponseError
from ...config.models import DEFAULT_ENDPOINT, DEFAULT_MODEL
from ...utils.error_handling import RemoteInferenceError


class RemoteInferenceClient:
    """
    HTTP client for chat completion inference.

    Handles request construction, authentication and the mapping of
    transport failures onto ``RemoteInferenceError`` subclasses.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the inference client.

        Args:
            api_key: Bearer token sent with every request
            endpoint: Full URL of the chat completion endpoint
            model: Model name placed in each request body
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.endpoint = endpoint
        self.model = model
        self.timeout = timeout

        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Authorization": f"Bearer {api_key}"
            }
        )

    @classmethod
    def from_config(cls, remote_config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "RemoteInferenceClient":
        """Build a client from a ``RemoteConfig`` section."""
        return cls(
            api_key=remote_config.api_key,
            endpoint=remote_config.endpoint,
            model=remote_config.model,
            timeout=remote_config.timeout,
            transport=transport,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 150
    ) -> str:
        """
        Send one chat completion request.

        Args:
            system_prompt: Fixed instruction for the model
            user_prompt: The per-call prompt
            temperature: Response randomness
            max_tokens: Token budget for the reply

        Returns:
            Content of the first choice

        Raises:
            RemoteConnectionError: If unable to connect to the endpoint
            RemoteServerError: If the endpoint returns an error status
            RemoteTimeoutError: If the request times out
            RemoteResponseError: If the body is not a chat completion
        """
        request_data = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": temperature,
            "max_tokens": max_tokens
        }

        try:
            logger.debug(f"Sending completion request: {user_prompt[:100]}...")

            response = await self.client.post(self.endpoint, json=request_data)
            response.raise_for_status()
            content = self._extract_content(response.json())

            logger.debug(f"Received response: {len(content)} characters")
            return content

        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(
                f"Request timed out after {self.timeout}s",
                details={"error_type": "timeout", "timeout_seconds": self.timeout}
            ) from e

        except httpx.TransportError as e:
            raise RemoteConnectionError(
                f"Unable to connect to inference endpoint {self.endpoint}: {e}",
                details={"error_type": "connection", "original_error": str(e)}
            ) from e

        except httpx.HTTPStatusError as e:
            error_msg = f"Inference endpoint returned error {e.response.status_code}"
            try:
                error_data = e.response.json()
                error_msg += f": {error_data.get('error', {}).get('message', 'Unknown error')}"
            except (ValueError, AttributeError):
                error_msg += f": {e.response.text[:200]}"

            raise RemoteServerError(error_msg, e.response.status_code) from e

        except RemoteInferenceError:
            raise

        except ValueError as e:
            raise RemoteResponseError(f"Response body is not valid JSON: {e}") from e

    def _extract_content(self, data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise RemoteResponseError(
                "Response is missing choices[0].message.content",
                details={"error_type": "response"}
            ) from e

        if not isinstance(content, str):
            raise RemoteResponseError("Response content is not text", details={"error_type": "response"})
        return content

    @property
    def is_connected(self) -> bool:
        """Check if client is open (basic check)."""
        return not self.client.is_closed
