
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.errors import ConfigurationMissing, PlatformRejected, PlatformUnreachable
from app.core.settings import WorkflowPlatformSettings
from app.workflow.models import FlowSpec, ScheduleSpec, ScriptSpec

logger = logging.getLogger(__name__)


class WorkflowPlatformClient:
    """
    Thin async client for the Workflow Platform (Windmill) REST API.
    Every call is bounded by the configured timeout; transport failures surface as
    PlatformUnreachable and HTTP errors as PlatformRejected.
    """

    def __init__(self, settings: WorkflowPlatformSettings, http_client: Optional[httpx.AsyncClient] = None):
        if not settings.token:
            raise ConfigurationMissing("WINDMILL_TOKEN")

        self.settings = settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {settings.token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, operation: str, payload: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.settings.api_base}/{path}"
        try:
            response = await self._client.request(
                method,
                url,
                json=payload,
                headers=self._headers,
                timeout=self.settings.timeout_seconds
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{operation} timed out after {self.settings.timeout_seconds}s")
            raise PlatformUnreachable(f"{operation} timed out after {self.settings.timeout_seconds}s") from e
        except httpx.HTTPError as e:
            logger.warning(f"{operation} failed to reach platform: {e}")
            raise PlatformUnreachable(f"{operation} could not reach the workflow platform: {e}") from e

        if response.status_code >= 400:
            logger.warning(f"{operation} rejected with {response.status_code}: {response.text[:200]}")
            raise PlatformRejected(response.status_code, response.text, operation)
        return response

    @staticmethod
    def _text_id(response: httpx.Response) -> str:
        # Create/run endpoints answer with a bare (sometimes quoted) identifier
        return response.text.strip().strip('"')

    async def create_script(self, script: ScriptSpec) -> str:
        response = await self._request("POST", "scripts/create", "create_script", script.to_payload())
        return self._text_id(response) or script.path

    async def create_flow(self, flow: FlowSpec) -> str:
        response = await self._request("POST", "flows/create", "create_flow", flow.to_payload())
        return self._text_id(response) or flow.path

    async def create_schedule(self, schedule: ScheduleSpec) -> str:
        response = await self._request("POST", "schedules/create", "create_schedule", schedule.to_payload())
        return self._text_id(response) or schedule.path

    async def run_script(self, path: str, args: Optional[Dict[str, Any]] = None) -> str:
        response = await self._request("POST", f"jobs/run/p/{path}", "run_script", args or {})
        return self._text_id(response)

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise PlatformRejected(response.status_code, f"invalid JSON: {response.text[:200]}", operation) from e

    async def get_job(self, job_id: str) -> Dict[str, Any]:
        response = await self._request("GET", f"jobs_u/get/{job_id}", "get_job")
        job = self._json(response, "get_job")
        if not isinstance(job, dict):
            raise PlatformRejected(response.status_code, f"job payload is not an object: {response.text[:200]}", "get_job")
        return job

    async def list_flows(self) -> List[Dict[str, Any]]:
        response = await self._request("GET", "flows/list", "list_flows")
        return self._json(response, "list_flows")

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()
