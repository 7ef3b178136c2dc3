"""Unit tests for plugin descriptor models."""

import pytest
from pydantic import ValidationError
from remotectl.models.plugin import FieldSpec, FieldType, PluginDescriptor


class TestFieldSpec:
    """Tests for FieldSpec."""

    def test_type_alias_and_case(self) -> None:
        """Descriptors may say "type" and any letter case."""
        spec = FieldSpec.model_validate({"name": "pass", "type": "Password"})

        assert spec.field_type == FieldType.PASSWORD
        assert spec.is_secret

    def test_default_field_type(self) -> None:
        spec = FieldSpec(name="host")

        assert spec.field_type == FieldType.TEXT
        assert spec.label == "host"

    @pytest.mark.parametrize(("raw", "expected"), [(True, "true"), (False, "false"), (22, "22"), (None, "")])
    def test_default_stringified(self, raw: object, expected: str) -> None:
        assert FieldSpec.model_validate({"name": "x", "default": raw}).default == expected

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldSpec.model_validate({"name": "x", "field_type": "dropdown"})


class TestPluginDescriptor:
    """Tests for PluginDescriptor."""

    def test_legacy_fields_become_basic(self) -> None:
        plugin = PluginDescriptor.model_validate({"name": "webdav", "fields": [{"name": "url"}]})

        assert [f.name for f in plugin.basic_fields] == ["url"]
        assert plugin.advanced_fields == []

    def test_all_fields_and_lookup(self) -> None:
        plugin = PluginDescriptor.model_validate(
            {
                "name": "sftp",
                "basic_fields": [{"name": "host"}],
                "advanced_fields": [{"name": "key_file", "field_type": "file"}],
            }
        )

        assert [f.name for f in plugin.all_fields] == ["host", "key_file"]
        assert plugin.get_field("key_file").field_type == FieldType.FILE
        assert plugin.get_field("nope") is None

    def test_matches_ignores_case(self) -> None:
        plugin = PluginDescriptor(name="Drive")

        assert plugin.matches("drive")
        assert not plugin.matches("s3")
        assert plugin.label == "Drive"

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            PluginDescriptor.model_validate({"display_name": "No name"})
