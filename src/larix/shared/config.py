"""Configuration classes for larix.

Component configurations validate themselves on construction; ``ParserConfig``
bundles them into an immutable object consumed by the API layer.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from larix.shared.errors import LarixError

DEFAULT_MAX_TREE_DEPTH = 512
_COMPONENT_FIELDS = ("tokenization", "tree")


class ConfigError(LarixError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class TokenizationConfig:
    """Configuration for the lexical tokenizer."""

    # Strip surrounding whitespace from text runs and drop the empty ones
    trim_text: bool = False

    def __post_init__(self) -> None:
        """Validate tokenization configuration."""
        if not isinstance(self.trim_text, bool):
            raise ValueError("trim_text must be a bool")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    max_tree_depth: Optional[int] = DEFAULT_MAX_TREE_DEPTH

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_tree_depth is None:
            return
        if not isinstance(self.max_tree_depth, int) or isinstance(self.max_tree_depth, bool):
            raise ValueError("max_tree_depth must be an int or None")
        if self.max_tree_depth <= 0:
            raise ValueError("max_tree_depth must be > 0 or None")


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for a parser instance.

    Instances are frozen; use ``override`` to derive modified copies.
    """

    tokenization: TokenizationConfig = field(default_factory=TokenizationConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)

    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        for component, component_class in (
            ("tokenization", TokenizationConfig),
            ("tree", TreeConfig),
        ):
            if not isinstance(getattr(self, component), component_class):
                raise ConfigValidationError(
                    f"{component} must be a {component_class.__name__}",
                    field_name=component,
                )

        try:
            self.tokenization.__post_init__()
            self.tree.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override.
                Component fields use ``component__field`` notation.

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> trimmed = config.override(tokenization__trim_text=True)
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENT_FIELDS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENT_FIELDS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored so that configurations written by newer
        versions can still be loaded.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type
                if hasattr(field_type, "__dataclass_fields__") and isinstance(value, dict):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                else:
                    field_values[field_name] = value
            return target_class(**field_values)

        try:
            return _dict_to_dataclass(data, cls)
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration: untrimmed text, bounded depth."""
        return cls(name="default")

    @classmethod
    def trimmed(cls) -> "ParserConfig":
        """Create a configuration that trims whitespace around text runs."""
        return cls(
            tokenization=TokenizationConfig(trim_text=True),
            name="trimmed",
        )
