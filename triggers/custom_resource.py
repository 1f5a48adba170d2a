"""
Custom Resource Trigger - orchestrator request/response boundary.

Receives one Create/Update/Delete request for a Prerequisites or Trigger
resource, reconciles it and reports exactly one outcome to the request's
ResponseURL.

Failure Handling:
    1. Log the error with request context
    2. Report FAILED with the best known physical id
       (computed id, else the request's PhysicalResourceId, else the
       LogicalResourceId) and the error text
    3. A failure of that report is logged and swallowed
    4. Re-raise the original error

Delete never fails over the resource's own properties: only what the drop
needs is read, and properties too broken to name a trigger mean there is
nothing to drop.

A request whose envelope cannot be parsed is still answered with FAILED
when its ResponseURL and identifiers are readable, then raised.

Exports:
    CustomResourceHandler: Request dispatcher
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from core.models import (
    CustomResourceEvent,
    CustomResourceResponse,
    ReconciliationResult,
    RequestType,
    ResourceProperties,
    ServiceType,
    TriggerSpec,
)
from exceptions import ConfigurationError
from infrastructure.cfn_response import CustomResourceResponder
from services.reconciliation import ReconciliationEngine, arn_suffix
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "CustomResourceEnvelope")

# Envelope fields a FAILED response cannot be addressed without
_REPLY_FIELDS = ("ResponseURL", "StackId", "RequestId", "LogicalResourceId")


class CustomResourceHandler:
    """
    Dispatches custom resource requests to the reconciliation engine.

    Usage:
        handler = CustomResourceHandler()
        handler.handle(event)

    Tests inject an engine with a recording executor and a responder
    backed by httpx.MockTransport.
    """

    def __init__(
        self,
        engine: Optional[ReconciliationEngine] = None,
        responder: Optional[CustomResourceResponder] = None
    ):
        self.engine = engine or ReconciliationEngine()
        self.responder = responder or CustomResourceResponder()

    @staticmethod
    def parse_event(raw_event: Dict[str, Any]) -> CustomResourceEvent:
        """
        Raises:
            ConfigurationError: Envelope missing or malformed fields
        """
        try:
            return CustomResourceEvent.model_validate(raw_event)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid custom resource request: {e}") from e

    def handle(self, raw_event: Dict[str, Any]) -> CustomResourceResponse:
        """
        Reconcile one request and report its outcome.

        Returns:
            The SUCCESS response that was delivered

        Raises:
            Whatever the reconciliation raised, after FAILED was reported
        """
        try:
            event = self.parse_event(raw_event)
        except ConfigurationError as e:
            self._report_unparseable(raw_event, e)
            raise

        log = LoggerFactory.create_with_context(
            ComponentType.TRIGGER,
            "CustomResource",
            request_id=event.request_id,
            stack_id=event.stack_id,
            logical_resource_id=event.logical_resource_id,
            request_type=event.request_type.value
        )
        try:
            return self._reconcile_and_report(event, log)
        finally:
            LoggerFactory.clear_context(log)

    def _reconcile_and_report(self, event: CustomResourceEvent, log) -> CustomResourceResponse:
        physical_id: Optional[str] = None
        try:
            if event.request_type == RequestType.DELETE:
                result = self._delete(event, log)
            else:
                props = event.properties()
                log.info(
                    f"📨 Event received: requestType={event.request_type.value} "
                    f"service={props.service_type.value}"
                )

                if props.service_type == ServiceType.PREREQUISITES:
                    physical_id = self._prerequisites_physical_id(event, props)
                    log.info(f"🧩 Prerequisites physicalId computed: {physical_id}")
                    result = self.engine.reconcile_prerequisites(
                        event.request_type,
                        props.database,
                        event.physical_resource_id
                    )
                else:
                    trigger = props.trigger_spec()
                    physical_id = self.engine.trigger_name_for(props.database, trigger)
                    log.info(
                        f"🧩 Trigger physicalId computed: {physical_id} "
                        f"(table={trigger.table} target={arn_suffix(trigger.target_arn)})"
                    )
                    old_props = self._old_properties(event, log)
                    result = self.engine.reconcile_trigger(
                        event.request_type,
                        props.database,
                        trigger,
                        old_database=old_props.database if old_props else None,
                        old_trigger=self._old_trigger(old_props)
                    )

            physical_id = result.physical_resource_id
            for drop in result.failed_drops:
                log.warning(f"⚠️ Ignored failed drop of '{drop.trigger_name}': {drop.error}")

        except Exception as e:
            log.error(f"❌ Handler error: {e}", exc_info=True)
            failed_id = physical_id or event.physical_resource_id or event.logical_resource_id
            try:
                self.responder.send(event, failed_id, error=str(e))
            except Exception as report_error:
                log.warning(f"⚠️ FAILED response could not be delivered: {report_error}")
            raise

        return self.responder.send(event, physical_id)

    def _delete(self, event: CustomResourceEvent, log) -> ReconciliationResult:
        """Delete reads only what the drop needs."""
        unchanged_id = event.physical_resource_id or event.logical_resource_id
        try:
            props = event.drop_properties()
            log.info(f"📨 Event received: requestType=Delete service={props.service_type.value}")
            if props.service_type == ServiceType.PREREQUISITES:
                return self.engine.reconcile_prerequisites(
                    RequestType.DELETE,
                    props.database,
                    event.physical_resource_id
                )
            trigger = props.drop_spec()
        except ConfigurationError as e:
            log.warning(f"⚠️ Nothing to drop, properties unreadable on delete: {e}")
            return ReconciliationResult(physical_resource_id=unchanged_id)

        return self.engine.reconcile_trigger(RequestType.DELETE, props.database, trigger)

    def _report_unparseable(self, raw_event: Any, error: Exception) -> None:
        """FAILED for a malformed envelope, when it can still be addressed."""
        logger.error(f"❌ Unparseable custom resource request: {error}")
        if not isinstance(raw_event, dict):
            return
        if not all(isinstance(raw_event.get(field), str) and raw_event.get(field) for field in _REPLY_FIELDS):
            logger.warning("⚠️ No FAILED response sent: request cannot be addressed")
            return

        reply_to = CustomResourceEvent.model_construct(
            response_url=raw_event["ResponseURL"],
            stack_id=raw_event["StackId"],
            request_id=raw_event["RequestId"],
            logical_resource_id=raw_event["LogicalResourceId"],
        )
        physical_id = raw_event.get("PhysicalResourceId") or raw_event["LogicalResourceId"]
        try:
            self.responder.send(reply_to, physical_id, error=str(error))
        except Exception as report_error:
            logger.warning(f"⚠️ FAILED response could not be delivered: {report_error}")

    @staticmethod
    def _prerequisites_physical_id(event: CustomResourceEvent, props: ResourceProperties) -> str:
        if event.request_type == RequestType.CREATE:
            return props.database.namespace
        return event.physical_resource_id or props.database.namespace

    @staticmethod
    def _old_properties(event: CustomResourceEvent, log) -> Optional[ResourceProperties]:
        """Previous properties on Update; unreadable ones are treated as absent."""
        if event.request_type != RequestType.UPDATE:
            return None
        try:
            return event.old_properties()
        except ConfigurationError as e:
            log.warning(f"⚠️ Ignoring unreadable OldResourceProperties: {e}")
            return None

    @staticmethod
    def _old_trigger(old_props: Optional[ResourceProperties]) -> Optional[TriggerSpec]:
        if old_props is None or old_props.trigger is None:
            return None
        return old_props.trigger.model_copy(update={
            "target_arn": old_props.target_arn,
            "function_key": old_props.function_key or old_props.trigger.function_key,
        })
