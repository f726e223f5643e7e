"""IBM Cloud VPC client used by the hibernation actuator."""
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import parse_qs, urlparse

import requests
from ibm_cloud_sdk_core import ApiException
from ibm_cloud_sdk_core.authenticators import IAMAuthenticator
from ibm_vpc import VpcV1

from cluster_hibernation.config.schemas import IBMCloudProviderSettings
from cluster_hibernation.domain.core.exceptions import (
    DeadlineExceededError,
    ProviderError,
    ResourceNotFoundError,
)
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.interfaces.credentials import require_secret_key
from cluster_hibernation.infrastructure.logging.logger import get_logger

# Key of the API key in the cluster's credentials secret.
IBMCLOUD_API_KEY_SECRET_KEY = "ibmcloud_api_key"

INSTANCE_ACTION_START = "start"
INSTANCE_ACTION_STOP = "stop"

HTTP_NOT_FOUND = 404

logger = get_logger(__name__)


class IBMCloudClient:
    """
    Makes calls to the IBM Cloud VPC API.

    The underlying SDK service keeps a mutable base URL, so a client must
    not be shared between concurrent operations. Build one per operation.
    """

    def __init__(self, vpc_service: VpcV1, region: str,
                 settings: Optional[IBMCloudProviderSettings] = None):
        """
        Initialize IBM Cloud client.

        Args:
            vpc_service: Authenticated VPC SDK service
            region: Region whose regional endpoint is used
            settings: Provider settings
        """
        self._vpc = vpc_service
        self.region = region
        self.settings = settings or IBMCloudProviderSettings()
        self._vpc.set_service_url(self.settings.service_url_template.format(region=region))

    @classmethod
    def from_api_key(cls, api_key: str, region: str,
                     settings: Optional[IBMCloudProviderSettings] = None) -> "IBMCloudClient":
        """Create a client authenticating with an IAM API key."""
        settings = settings or IBMCloudProviderSettings()
        if settings.iam_url:
            authenticator = IAMAuthenticator(api_key, url=settings.iam_url)
        else:
            authenticator = IAMAuthenticator(api_key)
        return cls(VpcV1(authenticator=authenticator), region, settings)

    @classmethod
    def from_secret(cls, secret: Mapping[str, str], secret_name: str, region: str,
                    settings: Optional[IBMCloudProviderSettings] = None) -> "IBMCloudClient":
        """
        Create a client from a credentials secret.

        Raises:
            CredentialsError: If the secret has no API key
        """
        api_key = require_secret_key(secret, IBMCLOUD_API_KEY_SECRET_KEY, secret_name)
        return cls.from_api_key(api_key, region, settings)

    def _call(self, ctx: CallContext, step: str, operation: Callable[..., Any],
              *args, **kwargs) -> Dict[str, Any]:
        ctx.check(step)
        self._vpc.set_http_config({"timeout": ctx.call_timeout()})
        try:
            response = operation(*args, **kwargs)
        except requests.exceptions.Timeout as e:
            raise DeadlineExceededError(step, details=str(e)) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(step, str(e)) from e
        return response.get_result() or {}

    def list_vpc_instances(self, ctx: CallContext, infra_id: str,
                           resource_group_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List the instances of the cluster VPC whose name contains ``infra_id``.

        The VPC is looked up by its installer name ``<infra_id>-vpc``.
        """
        vpc_name = f"{infra_id}-vpc"
        instances: List[Dict[str, Any]] = []
        start: Optional[str] = None
        while True:
            kwargs: Dict[str, Any] = {"vpc_name": vpc_name, "limit": self.settings.page_limit}
            if resource_group_id:
                kwargs["resource_group_id"] = resource_group_id
            if start:
                kwargs["start"] = start
            try:
                result = self._call(ctx, "failed to list vpc instances", self._vpc.list_instances, **kwargs)
            except ApiException as e:
                raise ProviderError("failed to list vpc instances", e.message, details={"code": e.code}) from e

            instances.extend(i for i in result.get("instances", []) if infra_id in i.get("name", ""))
            start = _next_start(result)
            if not start:
                break

        logger.debug("listed vpc instances", vpc_name=vpc_name, count=len(instances))
        return instances

    def create_instance_action(self, ctx: CallContext, instance_id: str, action: str) -> None:
        """Request a start or stop of one instance."""
        step = f"failed to create {action} instance action"
        try:
            self._call(ctx, step, self._vpc.create_instance_action, instance_id, action)
        except ApiException as e:
            if e.code == HTTP_NOT_FOUND:
                raise ResourceNotFoundError("instance", instance_id, details=e.message) from e
            raise ProviderError(step, e.message, details={"code": e.code}) from e

    def get_subnet(self, ctx: CallContext, subnet_id: str) -> Dict[str, Any]:
        """Get a subnet by its ID."""
        return self._get_resource(ctx, "subnet", subnet_id, self._vpc.get_subnet)

    def get_vpc(self, ctx: CallContext, vpc_id: str) -> Dict[str, Any]:
        """
        Get a VPC by its ID, searching every VPC region.

        The regional endpoint of this client is restored afterwards.
        """
        try:
            for region in self._get_vpc_regions(ctx):
                self._vpc.set_service_url(f"{region['endpoint']}/v1")
                try:
                    vpc = self._call(ctx, "failed to get vpc", self._vpc.get_vpc, vpc_id)
                except ApiException as e:
                    if e.code != HTTP_NOT_FOUND:
                        raise ProviderError("failed to get vpc", e.message, details={"code": e.code}) from e
                    continue
                if vpc:
                    return vpc
        finally:
            self._vpc.set_service_url(self.settings.service_url_template.format(region=self.region))

        raise ResourceNotFoundError("vpc", vpc_id)

    def get_vpc_zones_for_region(self, ctx: CallContext, region: str) -> List[str]:
        """Get the zone names of a VPC region."""
        try:
            result = self._call(ctx, "failed to list region zones", self._vpc.list_region_zones, region)
        except ApiException as e:
            if e.code == HTTP_NOT_FOUND:
                raise ResourceNotFoundError("region", region, details=e.message) from e
            raise ProviderError("failed to list region zones", e.message, details={"code": e.code}) from e
        return [zone["name"] for zone in result.get("zones", [])]

    def get_dedicated_host_by_name(self, ctx: CallContext, name: str) -> Dict[str, Any]:
        """Get a dedicated host of this client's region by name."""
        try:
            result = self._call(ctx, "failed to list dedicated hosts",
                                self._vpc.list_dedicated_hosts, name=name)
        except ApiException as e:
            raise ProviderError("failed to list dedicated hosts", e.message, details={"code": e.code}) from e
        for dhost in result.get("dedicated_hosts", []):
            if dhost.get("name") == name:
                return dhost
        raise ResourceNotFoundError("dedicated host", name)

    def _get_vpc_regions(self, ctx: CallContext) -> List[Dict[str, Any]]:
        try:
            result = self._call(ctx, "failed to list vpc regions", self._vpc.list_regions)
        except ApiException as e:
            raise ProviderError("failed to list vpc regions", e.message, details={"code": e.code}) from e
        return result.get("regions", [])

    def _get_resource(self, ctx: CallContext, resource_type: str, resource_id: str,
                      operation: Callable[..., Any]) -> Dict[str, Any]:
        step = f"failed to get {resource_type}"
        try:
            return self._call(ctx, step, operation, resource_id)
        except ApiException as e:
            if e.code == HTTP_NOT_FOUND:
                raise ResourceNotFoundError(resource_type, resource_id, details=e.message) from e
            raise ProviderError(step, e.message, details={"code": e.code}) from e


def _next_start(result: Mapping[str, Any]) -> Optional[str]:
    href = (result.get("next") or {}).get("href")
    if not href:
        return None
    values = parse_qs(urlparse(href).query).get("start")
    return values[0] if values else None
