import copy

import pytest

from apigw_auth.annotator.annotate import annotate_template, plan_annotations
from apigw_auth.annotator.events import functions_from_mapping
from apigw_auth.config import Settings
from apigw_auth.errors import ResourceNotFoundError


def method_resource(authorization_type="NONE"):
    return {
        "Type": "AWS::ApiGateway::Method",
        "Properties": {
            "HttpMethod": "GET",
            "AuthorizationType": authorization_type,
            "Integration": {"Type": "AWS_PROXY", "IntegrationHttpMethod": "POST"},
        },
    }


def make_resources():
    return {
        "ApiGatewayResourceItems": {"Type": "AWS::ApiGateway::Resource", "Properties": {}},
        "ApiGatewayMethodItemsIdVarGet": method_resource(),
        "ApiGatewayMethodItemsPost": method_resource(),
        "ApiGatewayMethodMyDashpathGet": method_resource(),
    }


def test_iam_auth_on_shorthand_event():
    resources = make_resources()
    functions = functions_from_mapping(
        {"getItem": {"events": [{"http": "GET /items/{id}", "useIAMAuth": True}]}}
    )

    annotations = annotate_template(functions, resources)

    props = resources["ApiGatewayMethodItemsIdVarGet"]["Properties"]
    assert props["AuthorizationType"] == "AWS_IAM"
    assert "Credentials" not in props["Integration"]
    assert [a.logical_id for a in annotations] == ["ApiGatewayMethodItemsIdVarGet"]


def test_caller_credentials_only():
    resources = make_resources()
    functions = functions_from_mapping(
        {
            "createItem": {
                "events": [
                    {"http": {"method": "post", "path": "items", "invokeWithCallerCredentials": True}}
                ]
            }
        }
    )

    annotate_template(functions, resources)

    props = resources["ApiGatewayMethodItemsPost"]["Properties"]
    assert props["Integration"]["Credentials"] == "arn:aws:iam::*:user/*"
    assert props["AuthorizationType"] == "NONE"


def test_both_flags_on_structured_event():
    resources = make_resources()
    functions = functions_from_mapping(
        {
            "myFuncGetItem": {
                "events": [
                    {
                        "http": {
                            "method": "GET",
                            "path": "/my-path",
                            "cors": True,
                            "useIAMAuth": True,
                            "invokeWithCallerCredentials": True,
                        }
                    }
                ]
            }
        }
    )

    annotate_template(functions, resources)

    props = resources["ApiGatewayMethodMyDashpathGet"]["Properties"]
    assert props["AuthorizationType"] == "AWS_IAM"
    assert props["Integration"]["Credentials"] == "arn:aws:iam::*:user/*"


def test_shorthand_and_structured_forms_agree():
    shorthand = make_resources()
    structured = make_resources()

    annotate_template(
        functions_from_mapping({"f": {"events": [{"http": "GET /items/{id}", "useIAMAuth": True}]}}),
        shorthand,
    )
    annotate_template(
        functions_from_mapping(
            {"f": {"events": [{"http": {"method": "GET", "path": "/items/{id}", "useIAMAuth": True}}]}}
        ),
        structured,
    )

    assert shorthand == structured


def test_unflagged_events_are_not_touched():
    resources = make_resources()
    before = copy.deepcopy(resources)
    functions = functions_from_mapping(
        {
            "f": {
                "events": [
                    {"http": "GET /items/{id}"},
                    {"http": {"method": "POST", "path": "items", "useIAMAuth": False}},
                    {"http": "GET /not/in/template"},
                ]
            }
        }
    )

    assert annotate_template(functions, resources) == []
    assert resources == before


def test_missing_resource_fails_without_partial_writes():
    resources = make_resources()
    before = copy.deepcopy(resources)
    functions = functions_from_mapping(
        {
            "ok": {"events": [{"http": "GET /items/{id}", "useIAMAuth": True}]},
            "broken": {"events": [{"http": "GET /missing", "useIAMAuth": True}]},
            "later": {"events": [{"http": "POST /items", "invokeWithCallerCredentials": True}]},
        }
    )

    with pytest.raises(ResourceNotFoundError) as excinfo:
        annotate_template(functions, resources)

    assert excinfo.value.logical_id == "ApiGatewayMethodMissingGet"
    assert resources == before


def test_resource_without_properties_is_not_a_method():
    resources = {"ApiGatewayMethodItemsGet": {"Type": "AWS::ApiGateway::Method"}}
    functions = functions_from_mapping({"f": {"events": [{"http": "GET /items", "useIAMAuth": True}]}})

    with pytest.raises(ResourceNotFoundError):
        annotate_template(functions, resources)


def test_missing_integration_is_created():
    resources = {"ApiGatewayMethodItemsGet": {"Properties": {"AuthorizationType": "NONE"}}}
    functions = functions_from_mapping(
        {"f": {"events": [{"http": "GET /items", "invokeWithCallerCredentials": True}]}}
    )

    annotate_template(functions, resources)

    assert resources["ApiGatewayMethodItemsGet"]["Properties"]["Integration"] == {
        "Credentials": "arn:aws:iam::*:user/*"
    }


def test_running_twice_equals_running_once():
    functions = functions_from_mapping(
        {
            "f": {
                "events": [
                    {"http": "GET /items/{id}", "useIAMAuth": True},
                    {"http": "POST /items", "invokeWithCallerCredentials": True},
                ]
            }
        }
    )
    once = make_resources()
    annotate_template(functions, once)

    twice = make_resources()
    annotate_template(functions, twice)
    annotate_template(functions, twice)

    assert once == twice


def test_plan_does_not_write_and_uses_settings():
    resources = make_resources()
    before = copy.deepcopy(resources)
    functions = functions_from_mapping(
        {"f": {"events": [{"http": "GET /items/{id}", "useIAMAuth": True, "invokeWithCallerCredentials": True}]}}
    )
    settings = Settings(caller_credentials_arn="arn:aws:iam::123456789012:role/caller")

    plan = plan_annotations(functions, resources, settings=settings)

    assert resources == before
    assert len(plan) == 1
    assert plan[0].authorization_type == "AWS_IAM"
    assert plan[0].credentials == "arn:aws:iam::123456789012:role/caller"


@pytest.mark.parametrize("integration", [None, "AWS_PROXY", ["x"]])
def test_non_mapping_integration_fails_before_any_write(integration):
    resources = {
        "ApiGatewayMethodAGet": method_resource(),
        "ApiGatewayMethodBGet": {"Properties": {"AuthorizationType": "NONE", "Integration": integration}},
    }
    before = copy.deepcopy(resources)
    functions = functions_from_mapping(
        {
            "a": {"events": [{"http": "GET /a", "useIAMAuth": True}]},
            "b": {"events": [{"http": "GET /b", "useIAMAuth": True, "invokeWithCallerCredentials": True}]},
        }
    )

    with pytest.raises(ResourceNotFoundError) as excinfo:
        annotate_template(functions, resources)

    assert excinfo.value.logical_id == "ApiGatewayMethodBGet"
    assert "Integration" in str(excinfo.value)
    assert resources == before


def test_non_mapping_integration_is_fine_without_caller_credentials():
    resources = {"ApiGatewayMethodAGet": {"Properties": {"AuthorizationType": "NONE", "Integration": None}}}
    functions = functions_from_mapping({"a": {"events": [{"http": "GET /a", "useIAMAuth": True}]}})

    annotate_template(functions, resources)

    assert resources["ApiGatewayMethodAGet"]["Properties"]["AuthorizationType"] == "AWS_IAM"
