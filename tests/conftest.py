import copy
import json

import pytest

BASE_TEMPLATE = {
    "replicaCount": 1,
    "autoscaling": {"enabled": True},
    "resources": {
        "limits": {"cpu": "1", "memory": "200Mi"},
        "requests": {"cpu": "500m", "memory": "100Mi"},
    },
    "envoyproxy": {
        "image": "envoyproxy/envoy:v1.16.0",
        "resources": {
            "limits": {"cpu": "50m", "memory": "50Mi"},
            "requests": {"cpu": "50m", "memory": "50Mi"},
        },
    },
}

RESOURCES_SCHEMA = {
    "type": "object",
    "properties": {
        "resources": {
            "type": "object",
            "properties": {
                "limits": {
                    "type": "object",
                    "required": ["cpu"],
                    "properties": {
                        "cpu": {"format": "cpu"},
                        "memory": {"format": "memory"},
                    },
                },
                "requests": {
                    "type": "object",
                    "properties": {
                        "cpu": {"format": "cpu"},
                        "memory": {"format": "memory"},
                    },
                },
            },
        },
        "autoscaling": {
            "type": "object",
            "properties": {"enabled": {"type": "boolean"}},
        },
    },
    "required": ["resources"],
}


@pytest.fixture
def template():
    """A fresh, fully valid values template."""
    return copy.deepcopy(BASE_TEMPLATE)


@pytest.fixture
def schema_dir(tmp_path):
    """Catalog directory holding a 'deployment' schema."""
    directory = tmp_path / "schemas"
    directory.mkdir()
    (directory / "deployment.json").write_text(json.dumps(RESOURCES_SCHEMA), encoding="utf-8")
    return directory
