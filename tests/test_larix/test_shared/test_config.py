"""Tests for the configuration system."""

import json
from dataclasses import FrozenInstanceError

import pytest

from larix.shared.config import (
    DEFAULT_MAX_TREE_DEPTH,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    TokenizationConfig,
    TreeConfig,
)
from larix.shared.errors import LarixError


class TestComponentConfigs:
    """Test suite for TokenizationConfig and TreeConfig."""

    def test_default_values(self) -> None:
        """Test default component configuration values."""
        assert TokenizationConfig().trim_text is False
        assert TreeConfig().max_tree_depth == DEFAULT_MAX_TREE_DEPTH == 512

    def test_tree_depth_must_be_positive(self) -> None:
        """Test that a non-positive depth limit is rejected."""
        with pytest.raises(ValueError, match="max_tree_depth must be > 0 or None"):
            TreeConfig(max_tree_depth=0)

    @pytest.mark.parametrize("value", ["3", 2.5, True])
    def test_tree_depth_must_be_int(self, value: object) -> None:
        """Test that non-integer depth limits are rejected."""
        with pytest.raises(ValueError, match="max_tree_depth must be an int or None"):
            TreeConfig(max_tree_depth=value)  # type: ignore[arg-type]

    def test_tree_depth_can_be_disabled(self) -> None:
        """Test that None disables the depth limit."""
        assert TreeConfig(max_tree_depth=None).max_tree_depth is None

    def test_trim_text_must_be_bool(self) -> None:
        """Test that trim_text rejects non-bool values."""
        with pytest.raises(ValueError, match="trim_text must be a bool"):
            TokenizationConfig(trim_text="yes")  # type: ignore[arg-type]


class TestParserConfig:
    """Test suite for ParserConfig."""

    def test_default_configuration(self) -> None:
        """Test default parser configuration."""
        config = ParserConfig()

        assert config.tokenization == TokenizationConfig()
        assert config.tree == TreeConfig()
        assert config.correlation_id is None
        assert config.name is None

    def test_configuration_is_frozen(self) -> None:
        """Test that parser configuration cannot be mutated."""
        config = ParserConfig()

        with pytest.raises(FrozenInstanceError):
            config.name = "changed"  # type: ignore[misc]

    def test_mutated_component_fails_validation(self) -> None:
        """Test that invalid component values are caught at construction."""
        tree = TreeConfig()
        tree.max_tree_depth = -1

        with pytest.raises(ConfigValidationError, match="max_tree_depth"):
            ParserConfig(tree=tree)

    def test_presets(self) -> None:
        """Test preset factory methods."""
        assert ParserConfig.default().tokenization.trim_text is False
        assert ParserConfig.default().name == "default"
        assert ParserConfig.trimmed().tokenization.trim_text is True
        assert ParserConfig.trimmed().name == "trimmed"

    def test_override_nested_field(self) -> None:
        """Test overriding component fields with double underscore notation."""
        config = ParserConfig()

        new_config = config.override(
            tokenization__trim_text=True,
            tree__max_tree_depth=10,
            correlation_id="req-1",
        )

        assert new_config.tokenization.trim_text is True
        assert new_config.tree.max_tree_depth == 10
        assert new_config.correlation_id == "req-1"
        # Original is untouched
        assert config.tokenization.trim_text is False
        assert config.tree.max_tree_depth == DEFAULT_MAX_TREE_DEPTH

    def test_override_with_invalid_value(self) -> None:
        """Test that overrides are validated."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tree__max_tree_depth=0)

    def test_override_unknown_component(self) -> None:
        """Test that unknown components are rejected with suggestions."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(render__indent=2)

        assert exc_info.value.field_name == "render__indent"
        assert "tokenization" in exc_info.value.suggestions

    def test_override_unknown_field(self) -> None:
        """Test that unknown top-level fields are rejected."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(verbosity=3)

    def test_to_dict(self) -> None:
        """Test dictionary conversion."""
        data = ParserConfig.trimmed().to_dict()

        assert data == {
            "tokenization": {"trim_text": True},
            "tree": {"max_tree_depth": DEFAULT_MAX_TREE_DEPTH},
            "correlation_id": None,
            "name": "trimmed",
        }

    def test_json_round_trip(self) -> None:
        """Test JSON serialization and deserialization."""
        config = ParserConfig().override(
            tokenization__trim_text=True, tree__max_tree_depth=None, name="custom"
        )

        json_str = config.to_json()
        restored = ParserConfig.from_json(json_str)

        assert json.loads(json_str)["tree"]["max_tree_depth"] is None
        assert restored == config

    def test_from_dict_partial(self) -> None:
        """Test that missing keys fall back to defaults."""
        config = ParserConfig.from_dict({"tokenization": {"trim_text": True}})

        assert config.tokenization.trim_text is True
        assert config.tree == TreeConfig()

    def test_from_dict_invalid_value(self) -> None:
        """Test that invalid dictionary values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"tree": {"max_tree_depth": 0}})

    @pytest.mark.parametrize("data", [
        {"tree": {"max_tree_depth": "3"}},
        {"tree": {"max_tree_depth": False}},
        {"tokenization": {"trim_text": 1}},
        {"tree": 5},
        {"tokenization": "trimmed"},
    ])
    def test_from_dict_malformed(self, data: dict) -> None:
        """Test that malformed dictionaries raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict(data)

    def test_from_dict_ignores_unknown_component_keys(self) -> None:
        """Test that unknown nested keys are ignored like top-level ones."""
        config = ParserConfig.from_dict({"tree": {"depth": 3}, "name": "x"})

        assert config.tree == TreeConfig()
        assert config.name == "x"

    def test_component_type_is_checked(self) -> None:
        """Test that components must be config objects."""
        with pytest.raises(ConfigValidationError, match="tree must be a TreeConfig") as exc_info:
            ParserConfig(tree={"max_tree_depth": 3})  # type: ignore[arg-type]

        assert exc_info.value.field_name == "tree"

    def test_override_with_wrong_type(self) -> None:
        """Test that overrides with non-integer depths are rejected."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tree__max_tree_depth="3")

        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tree=5)

    def test_config_errors_are_larix_errors(self) -> None:
        """Test configuration error hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)
        assert issubclass(ConfigError, LarixError)
