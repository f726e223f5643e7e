"""Tests for the IBM Cloud VPC client, instance manager and actuator."""
from unittest.mock import Mock, call

import pytest
import requests
from ibm_cloud_sdk_core import ApiException, DetailedResponse

from cluster_hibernation.config.schemas import IBMCloudProviderSettings
from cluster_hibernation.domain.core.exceptions import (
    CredentialsError,
    DeadlineExceededError,
    ErrorKind,
    OperationCancelledError,
    ProviderError,
    ResourceNotFoundError,
)
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.interfaces.credentials import StaticCredentialsSource
from cluster_hibernation.providers.ibmcloud import IBMCloudClient, IBMCloudInstanceManager
from cluster_hibernation.providers.ibmcloud.registration import (
    create_ibmcloud_actuator,
    create_ibmcloud_client_factory,
)

from conftest import make_instance


def response(result):
    return DetailedResponse(response=result, status_code=200)


def vpc_instance(name, status, instance_id=None):
    return {"id": instance_id or f"0717_{name}", "name": name, "status": status,
            "vpc": {"name": "ibm-cluster-x7k2p-vpc"}, "zone": {"name": "us-south-1"}}


@pytest.fixture
def vpc_service():
    return Mock()


@pytest.fixture
def client(vpc_service):
    return IBMCloudClient(vpc_service, "us-south")


class TestIBMCloudClient:
    """Test the VPC client wrapper."""

    def test_uses_regional_endpoint(self, vpc_service):
        IBMCloudClient(vpc_service, "eu-de")
        vpc_service.set_service_url.assert_called_with("https://eu-de.iaas.cloud.ibm.com/v1")

    def test_list_filters_by_vpc_name_and_infra_id(self, client, vpc_service, ctx):
        vpc_service.list_instances.return_value = response({"instances": [
            vpc_instance("ibm-cluster-x7k2p-master-0", "running"),
            vpc_instance("bastion", "running"),
            vpc_instance("ibm-cluster-x7k2p-worker-1", "stopped"),
        ]})

        instances = client.list_vpc_instances(ctx, "ibm-cluster-x7k2p")

        assert [i["name"] for i in instances] == ["ibm-cluster-x7k2p-master-0", "ibm-cluster-x7k2p-worker-1"]
        vpc_service.list_instances.assert_called_once_with(vpc_name="ibm-cluster-x7k2p-vpc", limit=50)

    def test_list_follows_pagination(self, client, vpc_service, ctx):
        vpc_service.list_instances.side_effect = [
            response({
                "instances": [vpc_instance("infra-a", "running")],
                "next": {"href": "https://us-south.iaas.cloud.ibm.com/v1/instances?limit=50&start=r006-abc"},
            }),
            response({"instances": [vpc_instance("infra-b", "stopped")]}),
        ]

        instances = client.list_vpc_instances(ctx, "infra", resource_group_id="rg-1")

        assert [i["name"] for i in instances] == ["infra-a", "infra-b"]
        assert vpc_service.list_instances.call_args_list == [
            call(vpc_name="infra-vpc", limit=50, resource_group_id="rg-1"),
            call(vpc_name="infra-vpc", limit=50, resource_group_id="rg-1", start="r006-abc"),
        ]

    def test_each_call_is_bounded_by_context_timeout(self, client, vpc_service):
        vpc_service.list_instances.return_value = response({"instances": []})
        client.list_vpc_instances(CallContext(per_call_timeout=12.0), "infra")
        vpc_service.set_http_config.assert_called_with({"timeout": 12.0})

    def test_list_api_error_is_provider_error(self, client, vpc_service, ctx):
        vpc_service.list_instances.side_effect = ApiException(500, message="internal error")

        with pytest.raises(ProviderError, match="failed to list vpc instances: internal error"):
            client.list_vpc_instances(ctx, "infra")

    def test_transport_timeout_is_deadline_exceeded(self, client, vpc_service, ctx):
        vpc_service.list_instances.side_effect = requests.exceptions.ReadTimeout("read timed out")

        with pytest.raises(DeadlineExceededError) as exc:
            client.list_vpc_instances(ctx, "infra")
        assert exc.value.kind is ErrorKind.DEADLINE_EXCEEDED

    def test_connection_error_is_provider_error(self, client, vpc_service, ctx):
        vpc_service.list_instances.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(ProviderError):
            client.list_vpc_instances(ctx, "infra")

    def test_cancelled_context_makes_no_call(self, client, vpc_service):
        ctx = CallContext()
        ctx.cancel()

        with pytest.raises(OperationCancelledError):
            client.create_instance_action(ctx, "0717_a", "stop")
        vpc_service.create_instance_action.assert_not_called()

    def test_create_instance_action(self, client, vpc_service, ctx):
        vpc_service.create_instance_action.return_value = response({"type": "stop", "status": "pending"})
        client.create_instance_action(ctx, "0717_a", "stop")
        vpc_service.create_instance_action.assert_called_once_with("0717_a", "stop")

    def test_get_subnet_not_found(self, client, vpc_service, ctx):
        vpc_service.get_subnet.side_effect = ApiException(404, message="Subnet not found")

        with pytest.raises(ResourceNotFoundError) as exc:
            client.get_subnet(ctx, "subnet-1")
        assert exc.value.kind is ErrorKind.NOT_FOUND
        assert exc.value.resource_type == "subnet"

    def test_get_subnet(self, client, vpc_service, ctx):
        vpc_service.get_subnet.return_value = response({"id": "subnet-1", "name": "infra-subnet"})
        assert client.get_subnet(ctx, "subnet-1")["name"] == "infra-subnet"

    def test_get_vpc_searches_regions(self, client, vpc_service, ctx):
        vpc_service.list_regions.return_value = response({"regions": [
            {"name": "us-south", "endpoint": "https://us-south.iaas.cloud.ibm.com"},
            {"name": "eu-de", "endpoint": "https://eu-de.iaas.cloud.ibm.com"},
        ]})
        vpc_service.get_vpc.side_effect = [
            ApiException(404, message="not found"),
            response({"id": "vpc-1", "name": "infra-vpc"}),
        ]

        vpc = client.get_vpc(ctx, "vpc-1")

        assert vpc["name"] == "infra-vpc"
        assert call("https://eu-de.iaas.cloud.ibm.com/v1") in vpc_service.set_service_url.call_args_list
        assert vpc_service.set_service_url.call_args == call("https://us-south.iaas.cloud.ibm.com/v1")

    def test_get_vpc_not_found_anywhere(self, client, vpc_service, ctx):
        vpc_service.list_regions.return_value = response({"regions": [
            {"name": "us-south", "endpoint": "https://us-south.iaas.cloud.ibm.com"},
        ]})
        vpc_service.get_vpc.side_effect = ApiException(404, message="not found")

        with pytest.raises(ResourceNotFoundError):
            client.get_vpc(ctx, "vpc-1")

    def test_get_vpc_other_error_aborts(self, client, vpc_service, ctx):
        vpc_service.list_regions.return_value = response({"regions": [
            {"name": "us-south", "endpoint": "https://us-south.iaas.cloud.ibm.com"},
        ]})
        vpc_service.get_vpc.side_effect = ApiException(403, message="forbidden")

        with pytest.raises(ProviderError, match="forbidden"):
            client.get_vpc(ctx, "vpc-1")

    def test_get_vpc_zones_for_region(self, client, vpc_service, ctx):
        vpc_service.list_region_zones.return_value = response({"zones": [
            {"name": "us-south-1"}, {"name": "us-south-2"}, {"name": "us-south-3"},
        ]})
        assert client.get_vpc_zones_for_region(ctx, "us-south") == ["us-south-1", "us-south-2", "us-south-3"]

    def test_get_dedicated_host_by_name(self, client, vpc_service, ctx):
        vpc_service.list_dedicated_hosts.return_value = response({"dedicated_hosts": [
            {"id": "dh-1", "name": "host-a"},
        ]})
        assert client.get_dedicated_host_by_name(ctx, "host-a")["id"] == "dh-1"

        vpc_service.list_dedicated_hosts.return_value = response({"dedicated_hosts": []})
        with pytest.raises(ResourceNotFoundError):
            client.get_dedicated_host_by_name(ctx, "host-b")

    def test_from_secret_requires_api_key(self):
        with pytest.raises(CredentialsError, match="ibmcloud_api_key"):
            IBMCloudClient.from_secret({}, "ibm-creds", "us-south")

    def test_from_secret_builds_client(self):
        client = IBMCloudClient.from_secret({"ibmcloud_api_key": "key"}, "ibm-creds", "us-south",
                                            IBMCloudProviderSettings(page_limit=10))
        assert client.region == "us-south"
        assert client.settings.page_limit == 10


class TestIBMCloudInstanceManager:
    """Test the capability adapter."""

    def test_list_cluster_instances(self, ibm_cluster, ctx):
        client = Mock()
        client.list_vpc_instances.return_value = [vpc_instance("ibm-cluster-x7k2p-master-0", "running", "0717_m0")]

        instances = IBMCloudInstanceManager(client).list_cluster_instances(ctx, ibm_cluster)

        client.list_vpc_instances.assert_called_once_with(ctx, "ibm-cluster-x7k2p", None)
        assert instances[0].name == "ibm-cluster-x7k2p-master-0"
        assert instances[0].instance_id == "0717_m0"
        assert instances[0].status == "running"
        assert instances[0].provider_data["zone"] == "us-south-1"

    def test_actions_are_issued_per_instance(self, ctx):
        client = Mock()
        instances = [make_instance("a", "running"), make_instance("b", "running")]

        IBMCloudInstanceManager(client).stop_instances(ctx, instances)

        assert client.create_instance_action.call_args_list == [
            call(ctx, "id-a", "stop"),
            call(ctx, "id-b", "stop"),
        ]

    def test_failure_on_second_instance_aborts_the_rest(self, ctx):
        client = Mock()
        client.create_instance_action.side_effect = [
            None,
            ProviderError("failed to create stop instance action", "quota exceeded"),
            None,
        ]
        instances = [make_instance("a", "running"), make_instance("b", "running"), make_instance("c", "running")]

        with pytest.raises(ProviderError) as exc:
            IBMCloudInstanceManager(client).stop_instances(ctx, instances)

        assert client.create_instance_action.call_count == 2
        assert exc.value.instance_name == "b"
        assert exc.value.unprocessed == ["b", "c"]
        assert exc.value.kind is ErrorKind.PROVIDER_ERROR
        assert "'b'" in str(exc.value)
        assert str(exc.value).startswith("failed to stop instances")

    def test_missing_instance_is_reported_by_name(self, ctx):
        client = Mock()
        client.create_instance_action.side_effect = ResourceNotFoundError("instance", "id-a")

        with pytest.raises(ProviderError) as exc:
            IBMCloudInstanceManager(client).start_instances(ctx, [make_instance("a", "stopped")])
        assert exc.value.instance_name == "a"
        assert exc.value.kind is ErrorKind.NOT_FOUND
        assert isinstance(exc.value.__cause__, ResourceNotFoundError)

    def test_deadline_is_not_wrapped(self, ctx):
        client = Mock()
        client.create_instance_action.side_effect = DeadlineExceededError("failed to create start instance action")

        with pytest.raises(DeadlineExceededError):
            IBMCloudInstanceManager(client).start_instances(ctx, [make_instance("a", "stopped")])


class TestIBMCloudActuator:
    """Test the IBM Cloud actuator end to end over a mocked VPC service."""

    def _actuator(self, vpc_service):
        return create_ibmcloud_actuator(
            client_factory=lambda cluster, ctx: IBMCloudClient(vpc_service, cluster.platform.ibmcloud.region)
        )

    def test_stop_machines(self, ibm_cluster):
        vpc_service = Mock()
        vpc_service.list_instances.return_value = response({"instances": [
            vpc_instance("ibm-cluster-x7k2p-master-0", "running", "0717_m0"),
            vpc_instance("ibm-cluster-x7k2p-worker-0", "stopped", "0717_w0"),
        ]})

        result = self._actuator(vpc_service).stop_machines(ibm_cluster)

        assert result.instance_names == ["ibm-cluster-x7k2p-master-0"]
        vpc_service.create_instance_action.assert_called_once_with("0717_m0", "stop")

    def test_machines_stopped(self, ibm_cluster):
        vpc_service = Mock()
        vpc_service.list_instances.return_value = response({"instances": [
            vpc_instance("ibm-cluster-x7k2p-master-0", "stopping"),
        ]})

        assert self._actuator(vpc_service).machines_stopped(ibm_cluster) == (False, ["ibm-cluster-x7k2p-master-0"])
        vpc_service.create_instance_action.assert_not_called()

    def test_handles_only_ibmcloud_clusters(self, ibm_cluster, aws_cluster):
        actuator = self._actuator(Mock())
        assert actuator.name == "ibmcloud"
        assert actuator.can_handle(ibm_cluster)
        assert not actuator.can_handle(aws_cluster)

    def test_client_factory_reads_credentials_secret(self, ibm_cluster, ctx):
        credentials = StaticCredentialsSource({("clusters", "ibm-creds"): {"ibmcloud_api_key": "key"}})
        client = create_ibmcloud_client_factory(credentials)(ibm_cluster, ctx)
        assert isinstance(client, IBMCloudClient)
        assert client.region == "us-south"

    def test_client_factory_missing_secret(self, ibm_cluster, ctx):
        factory = create_ibmcloud_client_factory(StaticCredentialsSource())
        with pytest.raises(CredentialsError):
            factory(ibm_cluster, ctx)

    def test_actuator_requires_credentials_or_factory(self):
        with pytest.raises(ValueError):
            create_ibmcloud_actuator()
