import pytest

from reportkit.plugins.plugin_config import PluginRegistryEntry
from reportkit.plugins.plugin_config import extract_plugin_id_from_package_name
from reportkit.plugins.plugin_config import generate_class_name_from_id
from reportkit.plugins.plugin_config import get_plugin_validation_errors
from reportkit.plugins.plugin_config import validate_class_name
from reportkit.plugins.plugin_config import validate_package_name
from reportkit.plugins.plugin_config import validate_plugin_entry
from reportkit.plugins.plugin_config import validate_plugin_id
from reportkit.plugins.plugin_config import validate_version

VALID_ENTRY = {
    "id": "patent",
    "name": "Patent Analysis",
    "className": "PatentPlugin",
    "packageName": "@reportkit/plugin-patent",
    "description": "Patent landscape reports",
    "version": "1.2.0",
    "supportedDataTypes": ["patent"],
}


@pytest.mark.parametrize("value, ok", [("patent", True), ("my-data-2", True), ("a", True), ("-bad", False), ("bad-", False), ("Bad", False), ("a" * 51, False), ("", False), (None, False), ("patent\n", False)])
def test_validate_plugin_id(value, ok):
    assert validate_plugin_id(value) is ok


@pytest.mark.parametrize("value, ok", [("PatentPlugin", True), ("XPlugin", False), ("patentPlugin", False), ("Patent", False), (42, False), ("PatentPlugin\n", False)])
def test_validate_class_name(value, ok):
    assert validate_class_name(value) is ok


@pytest.mark.parametrize("value, ok", [("@org/plugin-x", True), ("plugin-x", True), ("@Org/x", False), ("has space", False), ("plugin-x\n", False), ("@org/plugin-x\n", False)])
def test_validate_package_name(value, ok):
    assert validate_package_name(value) is ok


@pytest.mark.parametrize("value, ok", [("1.0.0", True), ("1.0.0-beta.1+build.5", True), ("01.0.0", False), ("1.0", False), ("v1.0.0", False), ("1.0.0\n", False)])
def test_validate_version(value, ok):
    assert validate_version(value) is ok


def test_valid_entry_mapping_and_model():
    assert validate_plugin_entry(VALID_ENTRY).valid
    assert validate_plugin_entry(PluginRegistryEntry.model_validate(VALID_ENTRY)).valid
    assert get_plugin_validation_errors(VALID_ENTRY) is None


def test_entry_errors_are_all_collected():
    entry = {**VALID_ENTRY, "id": "Bad_Id", "className": "bad", "version": "1", "supportedDataTypes": []}
    result = validate_plugin_entry(entry)
    assert not result.valid
    assert len(result.errors) == 4
    report = get_plugin_validation_errors(entry)
    assert report.startswith("Plugin validation failed:")
    assert "  1. Invalid plugin id" in report


def test_entry_missing_fields_and_bad_types():
    result = validate_plugin_entry({"supportedDataTypes": "patent"})
    assert "Plugin must have an 'id' field" in result.errors
    assert "Plugin must have a 'className' field" in result.errors
    assert "supportedDataTypes must be an array" in result.errors


def test_entry_with_trailing_newline_version_is_invalid():
    result = validate_plugin_entry({**VALID_ENTRY, "version": "1.0.0\n"})
    assert not result.valid
    assert result.errors[0].startswith("Invalid version")


def test_entry_metadata_keeps_extra_fields():
    entry = PluginRegistryEntry.model_validate(
        {**VALID_ENTRY, "metadata": {"author": "Data Team", "tags": ["ip"], "license": "MIT"}}
    )
    assert entry.metadata.author == "Data Team"
    assert entry.metadata.tags == ["ip"]
    assert entry.metadata.model_extra == {"license": "MIT"}
    assert validate_plugin_entry(entry).valid


def test_non_mapping_entry_does_not_raise():
    assert validate_plugin_entry("nope").valid is False


def test_entry_with_non_string_data_types():
    result = validate_plugin_entry({**VALID_ENTRY, "supportedDataTypes": ["ok", 3]})
    assert result.errors == ["All supportedDataTypes must be strings"]


def test_class_name_and_id_helpers():
    assert generate_class_name_from_id("my-data") == "MyDataPlugin"
    assert extract_plugin_id_from_package_name("@org/plugin-patent") == "patent"
    assert extract_plugin_id_from_package_name("plugin-sales") == "sales"
    assert extract_plugin_id_from_package_name("unrelated") is None
