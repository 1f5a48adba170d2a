"""
Custom Resource Response Transport.

Reports the outcome of one custom resource request by PUTting a JSON
body to the pre-signed ResponseURL carried in the request. The URL is
signed without a content type, so the request must send an empty one.

Usage:
    from infrastructure.cfn_response import CustomResourceResponder

    responder = CustomResourceResponder()
    responder.send(event, physical_resource_id="sls_svc_dev_fn")
    responder.send(event, physical_resource_id="sls_svc_dev_fn", error="boom")
"""

import json
from typing import Optional

import httpx

from config import get_config
from core.models import CustomResourceEvent, CustomResourceResponse, ResponseStatus
from exceptions import ResponseDeliveryError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "CustomResourceResponder")

DEFAULT_REASON = "See CloudWatch Logs for details"

# The orchestrator rejects Reason values above 4 KB
_MAX_REASON_LENGTH = 4000


def build_response(
    event: CustomResourceEvent,
    physical_resource_id: str,
    error: Optional[str] = None
) -> CustomResourceResponse:
    """
    Build the response body for one request.

    Data mirrors the PhysicalResourceId and, on failure, the error text.
    """
    data = {"PhysicalResourceId": physical_resource_id}
    if error:
        data["Error"] = error

    reason = DEFAULT_REASON
    if error:
        reason = f"{error} ({DEFAULT_REASON})"[:_MAX_REASON_LENGTH]

    return CustomResourceResponse(
        status=ResponseStatus.FAILED if error else ResponseStatus.SUCCESS,
        reason=reason,
        physical_resource_id=physical_resource_id,
        stack_id=event.stack_id,
        request_id=event.request_id,
        logical_resource_id=event.logical_resource_id,
        no_echo=False,
        data=data,
    )


class CustomResourceResponder:
    """
    Sends custom resource outcomes over HTTP.

    An httpx.Client can be injected (tests use httpx.MockTransport);
    otherwise a short-lived client is created per send.
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout if timeout is not None else get_config().response_timeout_seconds

    def send(
        self,
        event: CustomResourceEvent,
        physical_resource_id: str,
        error: Optional[str] = None
    ) -> CustomResourceResponse:
        """
        PUT the outcome to event.response_url.

        Returns:
            The response that was delivered

        Raises:
            ResponseDeliveryError: Transport failure or non-2xx status
        """
        response = build_response(event, physical_resource_id, error)
        body = json.dumps(response.to_body())

        logger.info(
            f"📤 Sending response: status={response.status.value} "
            f"physicalId={response.physical_resource_id}"
        )

        try:
            if self._client is not None:
                http_response = self._put(self._client, event.response_url, body)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    http_response = self._put(client, event.response_url, body)
        except httpx.HTTPError as e:
            raise ResponseDeliveryError(f"Response PUT failed: {e}") from e

        if not http_response.is_success:
            raise ResponseDeliveryError(
                f"Response PUT failed: {http_response.status_code} {http_response.reason_phrase}"
            )

        logger.info("✅ Response delivered")
        return response

    @staticmethod
    def _put(client: httpx.Client, url: str, body: str) -> httpx.Response:
        return client.put(url, content=body.encode("utf-8"), headers={"content-type": ""})
