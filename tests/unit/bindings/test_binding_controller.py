"""Resource list management and save composition."""

from __future__ import annotations

import asyncio

import pytest

from src.resourceconfig.bindings.binding_controller import ResourceBindingController
from src.resourceconfig.bindings.binding_models import (
    DEFAULT_RESOURCE_NAME,
    AffectedResource,
    CloudProviderOption,
    ResourceBinding,
    ResourceTypeOption,
)
from src.resourceconfig.exceptions import BindingError, FetchError, SaveBlockedError
from src.resourceconfig.forms.form_models import FormState
from src.resourceconfig.schema.schema_cache import SchemaCache
from src.resourceconfig.schema.schema_models import SchemaContext
from tests.mocks.schema_transport import FakeSchemaTransport, default_transport

pytestmark = pytest.mark.unit

SEEDED_AWS = {"capacityProvider": "FARGATE", "desiredCount": 2, "enableLogging": True}


def make_controller(
    transport: FakeSchemaTransport | None = None,
    *,
    context: SchemaContext = SchemaContext.BLUEPRINT,
    is_edit_mode: bool = False,
    supported: tuple[str, ...] = ("aws", "azure"),
) -> tuple[ResourceBindingController, FakeSchemaTransport]:
    transport = transport or default_transport()
    controller = ResourceBindingController(
        SchemaCache(transport),
        context=context,
        is_edit_mode=is_edit_mode,
        resource_types=[ResourceTypeOption("ecs", "ECS Service")],
        cloud_providers=[
            CloudProviderOption("aws", "Amazon Web Services"),
            CloudProviderOption("azure", "Microsoft Azure"),
        ],
        supported_cloud_provider_ids=supported,
    )
    return controller, transport


def test_added_resource_receives_seeded_defaults() -> None:
    controller, _ = make_controller()

    binding = asyncio.run(controller.add_resource("ecs", "aws"))

    assert binding.name == "ECS Service"
    assert controller.resources[0].configuration == SEEDED_AWS
    assert controller.form_for(0).state is FormState.SUCCESS_POPULATED


def test_unknown_resource_type_uses_default_name() -> None:
    controller, _ = make_controller()

    binding = asyncio.run(controller.add_resource("s3", "aws"))

    assert binding.name == DEFAULT_RESOURCE_NAME
    assert controller.form_for(0).state is FormState.SUCCESS_EMPTY


@pytest.mark.parametrize(
    ("resource_type_id", "cloud_provider_id", "message"),
    [
        ("ecs", "", "Please select a cloud provider for this resource"),
        ("", "aws", "Please select a resource type"),
    ],
)
def test_add_requires_type_and_provider(resource_type_id, cloud_provider_id, message) -> None:
    controller, transport = make_controller()

    with pytest.raises(BindingError, match=message):
        asyncio.run(controller.add_resource(resource_type_id, cloud_provider_id))

    assert controller.resources == []
    assert transport.calls == []


def test_edits_flow_back_through_on_change() -> None:
    controller, _ = make_controller()
    asyncio.run(controller.add_resource("ecs", "aws"))

    controller.form_for(0).set_value("clusterName", "main")

    assert controller.resources[0].configuration == {**SEEDED_AWS, "clusterName": "main"}


def test_provider_change_resets_configuration_before_seeding() -> None:
    controller, transport = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        controller.form_for(0).set_value("clusterName", "main")
        await controller.change_cloud_provider(0, "azure")

    asyncio.run(scenario())

    binding = controller.resources[0]
    assert binding.cloud_provider_id == "azure"
    assert binding.configuration == {"sku": "Standard"}
    assert transport.calls_for(("ecs", "azure")) == 1


def test_same_provider_is_a_no_op() -> None:
    controller, transport = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        form = controller.form_for(0)
        await controller.change_cloud_provider(0, "aws")
        return form

    form = asyncio.run(scenario())

    assert controller.form_for(0) is form
    assert len(transport.calls) == 1


def test_changes_from_replaced_form_are_ignored() -> None:
    controller, _ = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        old_form = controller.form_for(0)
        await controller.change_cloud_provider(0, "azure")
        return old_form

    old_form = asyncio.run(scenario())
    old_form.set_value("clusterName", "stale")

    assert not old_form.mounted
    assert controller.resources[0].configuration == {"sku": "Standard"}


def test_remove_and_rename_resources() -> None:
    controller, _ = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        await controller.add_resource("ecs", "azure")

    asyncio.run(scenario())
    removed_form = controller.form_for(0)
    removed = controller.remove_resource(0)
    controller.rename_resource(0, "Orders API")

    assert removed.cloud_provider_id == "aws"
    assert not removed_form.mounted
    assert [(item.name, item.cloud_provider_id) for item in controller.resources] == [
        ("Orders API", "azure")
    ]
    with pytest.raises(IndexError):
        controller.remove_resource(3)


def test_save_payload_encodes_configuration() -> None:
    controller, _ = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        form = controller.form_for(0)
        form.set_value("desiredCount", "5")
        form.set_value("enableLogging", "false")

    asyncio.run(scenario())

    assert controller.compose_save_payload() == [
        {
            "name": "ECS Service",
            "resourceTypeId": "ecs",
            "cloudProviderId": "aws",
            "configuration": {
                "capacityProvider": "FARGATE",
                "desiredCount": 5,
                "enableLogging": False,
            },
        }
    ]


def test_invalid_properties_block_save() -> None:
    controller, _ = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        controller.form_for(0).set_value("desiredCount", 50)
        controller.form_for(0).set_value("capacityProvider", None)

    asyncio.run(scenario())

    with pytest.raises(SaveBlockedError) as excinfo:
        controller.compose_save_payload()

    issues = excinfo.value.issues
    assert {(issue.index, issue.property_name, issue.message) for issue in issues} == {
        (0, "capacityProvider", "Capacity Provider is required"),
        (0, "desiredCount", "Desired Count must be between 1 and 10"),
    }
    assert "resource #1" in str(excinfo.value)


def test_blank_name_blocks_save() -> None:
    controller, _ = make_controller()
    asyncio.run(controller.add_resource("ecs", "aws"))
    controller.rename_resource(0, "   ")

    messages = [issue.message for issue in controller.validate()]

    assert messages == ["Display name is required"]


def test_loading_and_failed_forms_block_save() -> None:
    transport = default_transport()
    transport.fail_next(("ecs", "azure"), FetchError("Network error: connection refused"))
    controller, _ = make_controller(transport)

    async def scenario():
        gate = transport.hold(("ecs", "aws"))
        pending = asyncio.create_task(controller.add_resource("ecs", "aws"))
        await asyncio.sleep(0)
        await controller.add_resource("ecs", "azure")
        loading = [issue.message for issue in controller.validate()]
        gate.set()
        await pending
        return loading

    loading = asyncio.run(scenario())

    assert loading == [
        "Properties are still loading",
        "Properties could not be loaded: Network error: connection refused",
    ]


def test_blueprint_needs_a_supported_provider() -> None:
    blueprint, _ = make_controller(supported=())
    stack, _ = make_controller(context=SchemaContext.STACK, supported=())

    assert [issue.message for issue in blueprint.validate()] == [
        "Please select at least one cloud provider"
    ]
    assert stack.validate() == []
    assert stack.compose_save_payload() == []


def test_removing_a_provider_in_use_needs_confirmation() -> None:
    controller, _ = make_controller()

    async def scenario():
        await controller.add_resource("ecs", "aws")
        await controller.add_resource("ecs", "azure")

    asyncio.run(scenario())

    impact = controller.request_supported_providers(["azure"])

    assert impact.needs_confirmation
    assert impact.affected == (AffectedResource("ECS Service", "Amazon Web Services"),)
    assert controller.supported_cloud_provider_ids == ["aws", "azure"]
    assert controller.pending_supported_cloud_provider_ids == ["azure"]

    controller.cancel_supported_providers()

    assert controller.pending_supported_cloud_provider_ids is None
    assert len(controller.resources) == 2

    controller.request_supported_providers(["azure"])
    dropped = controller.confirm_supported_providers()

    assert [binding.cloud_provider_id for binding in dropped] == ["aws"]
    assert [binding.cloud_provider_id for binding in controller.resources] == ["azure"]
    assert controller.supported_cloud_provider_ids == ["azure"]


def test_unaffected_provider_change_applies_immediately() -> None:
    controller, _ = make_controller(supported=("aws",))

    impact = controller.request_supported_providers(["aws", "azure", "aws"])

    assert not impact.needs_confirmation
    assert controller.supported_cloud_provider_ids == ["aws", "azure"]
    with pytest.raises(BindingError):
        controller.confirm_supported_providers()


def test_existing_resources_keep_their_configuration_in_edit_mode() -> None:
    controller, transport = make_controller(is_edit_mode=True)
    saved = [
        {
            "id": "res-1",
            "name": "Orders",
            "resourceTypeId": "ecs",
            "cloudProviderId": "aws",
            "configuration": {"capacityProvider": "EC2", "desiredCount": 3},
        },
        ResourceBinding("ecs", "azure", "Billing", {"sku": "Basic"}, id="res-2"),
    ]

    asyncio.run(controller.load_existing(saved))

    assert [binding.configuration for binding in controller.resources] == [
        {"capacityProvider": "EC2", "desiredCount": 3},
        {"sku": "Basic"},
    ]
    payload = controller.compose_save_payload()
    assert [item["id"] for item in payload] == ["res-1", "res-2"]
    assert len(transport.calls) == 2


def test_missing_required_choice_blocks_save_until_supplied() -> None:
    controller, _ = make_controller(is_edit_mode=True)
    saved = [
        {
            "id": "res-1",
            "name": "Orders",
            "resourceTypeId": "ecs",
            "cloudProviderId": "aws",
            "configuration": {},
        }
    ]
    asyncio.run(controller.load_existing(saved))
    form = controller.form_for(0)

    capacity = form.render().fields[0]
    assert capacity.required_marker == "*"
    assert capacity.raw_value == ""
    with pytest.raises(SaveBlockedError) as excinfo:
        controller.compose_save_payload()
    assert [issue.message for issue in excinfo.value.issues] == [
        "Capacity Provider is required"
    ]

    form.set_value("capacityProvider", "FARGATE_SPOT")

    assert controller.compose_save_payload()[0]["configuration"] == {
        "capacityProvider": "FARGATE_SPOT"
    }


def test_new_resource_in_edit_mode_is_seeded() -> None:
    controller, _ = make_controller(is_edit_mode=True)

    asyncio.run(controller.add_resource("ecs", "aws"))

    assert controller.resources[0].configuration == SEEDED_AWS


def test_set_disabled_reaches_every_form() -> None:
    controller, _ = make_controller()
    asyncio.run(controller.add_resource("ecs", "aws"))

    controller.set_disabled(True)

    assert controller.form_for(0).disabled
    assert controller.form_for(0).render().fields[0].disabled
