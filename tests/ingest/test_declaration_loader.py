"""Tests for declaration loading and normalization."""

import json
from pathlib import Path
import pytest
from stackplan.ingest.declaration_loader import load_declarations_file
from stackplan.ingest.declaration_normalizer import normalize_declarations, to_attribute_value
from stackplan.ingest.models import (
    BoolValue,
    ListValue,
    MapValue,
    NumberValue,
    ReferenceValue,
    ResourceKind,
    SecretValue,
    StringValue,
    render_attributes,
)
from stackplan.utils.errors import DeclarationLoadError

TWO_TIER = Path(__file__).resolve().parents[2] / "declarations" / "two_tier.yaml"


class TestDeclarationLoader:
    """Test loading declaration files."""
    
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "stack.yaml"
        path.write_text("resources:\n  - id: vpc\n    kind: Network\n")
        
        data = load_declarations_file(str(path))
        assert data["resources"] == [{"id": "vpc", "kind": "Network"}]
    
    def test_load_json(self, tmp_path):
        path = tmp_path / "stack.json"
        path.write_text(json.dumps({"resources": [{"id": "vpc", "kind": "Network"}]}))
        
        assert load_declarations_file(str(path))["resources"][0]["id"] == "vpc"
    
    def test_empty_file_has_no_resources(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        
        assert load_declarations_file(str(path)) == {"resources": []}
    
    def test_load_missing_file(self):
        with pytest.raises(DeclarationLoadError, match="not found"):
            load_declarations_file("nonexistent.yaml")
    
    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "stack.tf"
        path.write_text("resource {}")
        
        with pytest.raises(DeclarationLoadError, match="Unsupported"):
            load_declarations_file(str(path))
    
    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("resources: [unclosed")
        
        with pytest.raises(DeclarationLoadError, match="Invalid YAML"):
            load_declarations_file(str(path))
    
    def test_missing_required_fields(self, tmp_path):
        path = tmp_path / "stack.yaml"
        path.write_text("resources:\n  - id: vpc\n")
        
        with pytest.raises(DeclarationLoadError, match="kind"):
            load_declarations_file(str(path))
    
    def test_two_tier_example_loads(self):
        declarations = normalize_declarations(load_declarations_file(str(TWO_TIER)))
        
        kinds = {resource.kind for resource in declarations.resources}
        assert kinds == set(ResourceKind)
        assert len(declarations.resources) == 15


class TestNormalization:
    """Test conversion to tagged values and dependency extraction."""
    
    def test_scalar_values(self):
        assert to_attribute_value("t3.micro", "x") == StringValue(value="t3.micro")
        assert to_attribute_value(20, "x") == NumberValue(value=20)
        assert to_attribute_value(True, "x") == BoolValue(value=True)
        assert to_attribute_value({"ref": "vpc"}, "x") == ReferenceValue(target="vpc")
        assert to_attribute_value({"secret": "DB_PASSWORD"}, "x") == SecretValue(name="DB_PASSWORD")
    
    def test_bool_is_not_a_number(self):
        assert isinstance(to_attribute_value(False, "x"), BoolValue)
    
    def test_nested_values(self):
        value = to_attribute_value({"Name": "web", "sgs": [{"ref": "sg"}]}, "tags")
        
        assert isinstance(value, MapValue)
        assert value.entries["sgs"] == ListValue(items=[ReferenceValue(target="sg")])
    
    def test_unsupported_value(self):
        with pytest.raises(DeclarationLoadError, match="Unsupported value"):
            to_attribute_value(object(), "web.weird")
    
    def test_dependencies_include_references(self):
        data = {"resources": [
            {"id": "vpc", "kind": "Network"},
            {"id": "igw", "kind": "Gateway"},
            {
                "id": "rtb",
                "kind": "route_table",
                "attributes": {"network_id": {"ref": "vpc"}, "routes": [{"gateway_id": {"ref": "igw"}}]},
                "depends_on": ["vpc"],
            },
        ]}
        
        resources = normalize_declarations(data).resources
        assert resources[2].kind == ResourceKind.ROUTE_TABLE
        assert resources[2].depends_on == ["vpc", "igw"]
    
    def test_unknown_kind(self):
        with pytest.raises(DeclarationLoadError, match="unknown kind"):
            normalize_declarations({"resources": [{"id": "x", "kind": "Lambda"}]})
    
    def test_render_attributes_resolves_references(self):
        data = {"resources": [{
            "id": "db",
            "kind": "DbInstance",
            "attributes": {
                "subnet_ids": [{"ref": "private_a"}],
                "password": {"secret": "DB_PASSWORD"},
                "allocated_storage": 20,
            },
        }]}
        node = normalize_declarations(data).resources[0]
        
        rendered = render_attributes(node.attributes, lambda target: f"id-of-{target}")
        assert rendered == {
            "subnet_ids": ["id-of-private_a"],
            "password": {"secret": "DB_PASSWORD"},
            "allocated_storage": 20,
        }
