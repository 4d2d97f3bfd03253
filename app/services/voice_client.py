"""
Voice platform client
Starts and stops hosted voice calls through the Vapi REST API using httpx
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.config.settings import settings
from app.utils.exceptions import ConfigurationError, VoiceServiceError

logger = logging.getLogger(__name__)


@dataclass
class StartedCall:
    """Handle of a call created on the voice platform"""
    call_id: str
    control_url: Optional[str] = None
    web_call_url: Optional[str] = None


class VoiceClient:
    """Minimal async client for the hosted voice platform"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.vapi_api_key
        self.base_url = (base_url or settings.vapi_base_url).rstrip("/")
        self.timeout = timeout or settings.vapi_timeout_seconds
        self.transport = transport

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError(
                "VAPI_API_KEY environment variable is not set. Voice interviews are unavailable."
            )

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self.transport,
            ) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"[VOICE][HTTP] Request timeout: {url}")
            raise VoiceServiceError("Voice platform request timed out. Please try again.") from e
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"[VOICE][HTTP] HTTP {e.response.status_code} from voice platform: {message}")
            raise VoiceServiceError(message, details={"status_code": e.response.status_code}) from e
        except httpx.HTTPError as e:
            logger.error(f"[VOICE][HTTP] Voice platform request failed: {str(e)}")
            raise VoiceServiceError(f"Voice platform request failed: {str(e)}") from e

        if not response.content:
            return {}
        return response.json()

    async def start(
        self,
        assistant: Optional[Dict[str, Any]] = None,
        workflow_id: Optional[str] = None,
        variable_values: Optional[Dict[str, Any]] = None,
    ) -> StartedCall:
        """
        Start a web call with either a workflow or an inline assistant

        Raises:
            VoiceServiceError: when the platform rejects the request
        """
        if workflow_id:
            payload: Dict[str, Any] = {"workflowId": workflow_id}
            if variable_values:
                payload["workflowOverrides"] = {"variableValues": variable_values}
        elif assistant is not None:
            payload = {"assistant": assistant}
            if variable_values:
                payload["assistantOverrides"] = {"variableValues": variable_values}
        else:
            raise ConfigurationError("Either an assistant or a workflow id is required to start a call")

        data = await self._post("/call/web", payload)
        call_id = data.get("id")
        if not call_id:
            raise VoiceServiceError("Voice platform did not return a call id")

        monitor = data.get("monitor") or {}
        logger.info(f"[VOICE][START] Call started: {call_id}")
        return StartedCall(
            call_id=call_id,
            control_url=monitor.get("controlUrl"),
            web_call_url=data.get("webCallUrl"),
        )

    async def stop(self, call: StartedCall) -> None:
        """Ask the platform to end a running call"""
        if not call.control_url:
            logger.warning(f"[VOICE][STOP] No control URL for call {call.call_id}, nothing to stop")
            return
        await self._post(call.control_url, {"type": "end-call"})
        logger.info(f"[VOICE][STOP] End requested for call {call.call_id}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    message = body.get("message") if isinstance(body, dict) else None
    if isinstance(message, list):
        message = "; ".join(str(m) for m in message)
    return str(message or body)


# Create global instance
voice_client = VoiceClient()
