"""Tests for EC2 discovery, state lookup and power transitions."""

from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from flotilla.core.models import PowerTransition
from flotilla.providers.aws.compute import EC2Manager, build_tag_filters, display_name_for
from flotilla.providers.exceptions import ProviderAPIError, ProviderCredentialsError

REGION = "us-east-1"
AMI_ID = "ami-12c6146b"


def ssm_client(ping_statuses=None, error=None):
    """Return a mocked SSM client whose paginator yields the given ping statuses.

    Parameters
    ----------
    ping_statuses : dict[str, str] | None
        Instance id to PingStatus
    error : Exception | None
        Raised by the paginator instead of returning pages
    """
    client = MagicMock()
    paginator = client.get_paginator.return_value

    if error is not None:
        paginator.paginate.side_effect = error
    else:
        paginator.paginate.return_value = [
            {
                "InstanceInformationList": [
                    {"InstanceId": instance_id, "PingStatus": status}
                    for instance_id, status in (ping_statuses or {}).items()
                ]
            }
        ]

    return client


@pytest.fixture
def ec2(aws_credentials):
    """Moto EC2 client for the test region.

    Yields
    ------
    Any
        boto3 EC2 client backed by moto
    """
    with mock_aws():
        yield boto3.client("ec2", region_name=REGION)


def launch(ec2, name=None, tags=None):
    tag_list = [{"Key": k, "Value": v} for k, v in (tags or {}).items()]
    if name:
        tag_list.append({"Key": "Name", "Value": name})

    kwargs = {"ImageId": AMI_ID, "MinCount": 1, "MaxCount": 1, "InstanceType": "t3.micro"}
    if tag_list:
        kwargs["TagSpecifications"] = [{"ResourceType": "instance", "Tags": tag_list}]

    return ec2.run_instances(**kwargs)["Instances"][0]["InstanceId"]


def manager_for(ec2, ssm):
    clients = {"ec2": ec2, "ssm": ssm}
    return EC2Manager(boto3_client_factory=lambda service, region_name: clients[service])


def test_build_tag_filters():
    assert build_tag_filters({"env": "prod", "role": "web"}) == [
        {"Name": "tag:env", "Values": ["prod"]},
        {"Name": "tag:role", "Values": ["web"]},
    ]
    assert build_tag_filters({}) == []


def test_display_name_falls_back_to_id():
    assert display_name_for({"InstanceId": "i-1", "Tags": [{"Key": "Name", "Value": "web"}]}) == "web"
    assert display_name_for({"InstanceId": "i-1", "Tags": [{"Key": "Name", "Value": ""}]}) == "i-1"
    assert display_name_for({"InstanceId": "i-1"}) == "i-1"


class TestDiscoverTargets:
    def test_filters_by_every_tag(self, ec2):
        match = launch(ec2, name="web-1", tags={"env": "prod", "role": "web"})
        launch(ec2, tags={"env": "prod", "role": "db"})
        launch(ec2, tags={"env": "dev", "role": "web"})

        targets = manager_for(ec2, ssm_client({match: "Online"})).discover_targets(
            REGION, {"env": "prod", "role": "web"}
        )

        assert [t.id for t in targets] == [match]
        assert targets[0].display_name == "web-1"
        assert targets[0].lifecycle_state == "running"
        assert targets[0].agent_status == "Online"

    def test_instances_without_agent_read_as_no_agent(self, ec2):
        online = launch(ec2, tags={"env": "prod"})
        missing = launch(ec2, tags={"env": "prod"})

        targets = manager_for(ec2, ssm_client({online: "ConnectionLost"})).discover_targets(
            REGION, {"env": "prod"}
        )

        statuses = {t.id: t.agent_status for t in targets}
        assert statuses == {online: "ConnectionLost", missing: "No Agent"}

    def test_no_match_skips_agent_query(self, ec2):
        launch(ec2, tags={"env": "dev"})
        ssm = ssm_client()

        targets = manager_for(ec2, ssm).discover_targets(REGION, {"env": "prod"})

        assert targets == []
        ssm.get_paginator.assert_not_called()

    def test_agent_query_failure_marks_all_missing(self, ec2, caplog):
        instance_id = launch(ec2, tags={"env": "prod"})
        error = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}},
            "DescribeInstanceInformation",
        )

        targets = manager_for(ec2, ssm_client(error=error)).discover_targets(
            REGION, {"env": "prod"}
        )

        assert [(t.id, t.agent_status) for t in targets] == [(instance_id, "No Agent")]
        assert "Failed to get SSM agent status" in caplog.text

    def test_ec2_error_is_translated(self):
        ec2 = MagicMock()
        ec2.get_paginator.return_value.paginate.side_effect = ClientError(
            {"Error": {"Code": "AuthFailure", "Message": "bad token"}}, "DescribeInstances"
        )

        with pytest.raises(ProviderCredentialsError, match="bad token"):
            manager_for(ec2, ssm_client()).discover_targets(REGION, {"env": "prod"})


class TestGetTargetState:
    def test_returns_current_state_and_agent(self, ec2):
        instance_id = launch(ec2, name="db-1")
        ec2.stop_instances(InstanceIds=[instance_id])
        ssm = ssm_client({instance_id: "Online"})

        target = manager_for(ec2, ssm).get_target_state(REGION, instance_id)

        assert target.id == instance_id
        assert target.display_name == "db-1"
        assert target.lifecycle_state in ("stopping", "stopped")
        assert target.agent_status == "Online"
        ssm.get_paginator.return_value.paginate.assert_called_once_with(
            Filters=[{"Key": "InstanceIds", "Values": [instance_id]}]
        )

    def test_unknown_instance_is_api_error(self, ec2):
        with pytest.raises(ProviderAPIError) as exc_info:
            manager_for(ec2, ssm_client()).get_target_state(REGION, "i-0123456789abcdef0")

        assert exc_info.value.error_code == "InvalidInstanceID.NotFound"


class TestTransitionPower:
    @pytest.mark.parametrize(
        "transition,call",
        [
            (PowerTransition.START, "start_instances"),
            (PowerTransition.STOP, "stop_instances"),
            (PowerTransition.REBOOT, "reboot_instances"),
        ],
    )
    def test_calls_matching_api(self, transition, call):
        ec2 = MagicMock()

        manager_for(ec2, ssm_client()).transition_power(REGION, "i-1", transition)

        getattr(ec2, call).assert_called_once_with(InstanceIds=["i-1"])

    def test_stop_against_moto(self, ec2):
        instance_id = launch(ec2)

        manager_for(ec2, ssm_client()).transition_power(
            REGION, instance_id, PowerTransition.STOP
        )

        state = ec2.describe_instances(InstanceIds=[instance_id])["Reservations"][0][
            "Instances"
        ][0]["State"]["Name"]
        assert state in ("stopping", "stopped")

    def test_api_error_keeps_code(self):
        ec2 = MagicMock()
        ec2.start_instances.side_effect = ClientError(
            {"Error": {"Code": "IncorrectInstanceState", "Message": "not stopped"}},
            "StartInstances",
        )

        with pytest.raises(ProviderAPIError) as exc_info:
            manager_for(ec2, ssm_client()).transition_power(
                REGION, "i-1", PowerTransition.START
            )

        assert exc_info.value.error_code == "IncorrectInstanceState"


def test_clients_are_created_once_per_service_and_region():
    factory = MagicMock()
    manager = EC2Manager(boto3_client_factory=factory)

    manager.client("ec2", "us-east-1")
    manager.client("ec2", "us-east-1")
    manager.client("ec2", "eu-west-1")

    assert factory.call_count == 2
    factory.assert_any_call("ec2", region_name="eu-west-1")
