"""Tool Schema — immutable, declarative descriptions of agent tools.

Invariants:
    - ToolDefinition and ToolParameter are frozen (registered once at import time)
    - Declaration shape: {name, description, parameters: {type: object, properties, required}}
    - Array parameters always carry an items type in the rendered schema

Design Decisions:
    - One definition renders to both the provider-neutral declaration and the
      Anthropic input_schema format
"""

from dataclasses import dataclass, field
from typing import Any

PARAM_TYPES = frozenset({
    "string", "number", "integer", "boolean", "object", "array",
})


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: str
    description: str = ""
    required: bool = False
    items_type: str | None = None
    enum: tuple[str, ...] | None = None
    default: Any = None

    def __post_init__(self):
        if self.type not in PARAM_TYPES:
            raise ValueError(f"Unsupported parameter type '{self.type}' for '{self.name}'")
        if self.type == "array" and self.items_type is None:
            raise ValueError(f"Array parameter '{self.name}' needs items_type")

    def to_property(self) -> dict:
        prop: dict[str, Any] = {"type": self.type}
        if self.description:
            prop["description"] = self.description
        if self.items_type:
            prop["items"] = {"type": self.items_type}
        if self.enum:
            prop["enum"] = list(self.enum)
        if self.default is not None:
            prop["default"] = self.default
        return prop


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = field(default_factory=tuple)

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def input_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {p.name: p.to_property() for p in self.parameters},
            "required": self.required,
        }

    def to_declaration(self) -> dict:
        """Provider-neutral function declaration."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.input_schema(),
        }

    def to_anthropic(self) -> dict:
        """Anthropic Messages API tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema(),
        }


def missing_required(definition: ToolDefinition, args: dict) -> list[str]:
    """Names of required parameters absent (or None) in args."""
    return [
        name for name in definition.required
        if args.get(name) is None
    ]
