"""Function and object schemas exposed to the reasoning loop.

Schemas are immutable values, validated once when they are built.  Object
types are referenced by name and kept in an arena (``FunctionSchema.objects``)
so that self-referencing and mutually-referencing object types serialize
to a finite wire form.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from function_gateway.errors import SchemaError

PRIMITIVE_TYPES: frozenset[str] = frozenset(
    {"string", "number", "boolean", "array", "object"}
)


def is_primitive(type_name: str) -> bool:
    return type_name in PRIMITIVE_TYPES


def _type_refs(type_name: str, items: str | None) -> list[str]:
    """Object names referenced by a type descriptor."""
    refs = []
    if not is_primitive(type_name):
        refs.append(type_name)
    if items and not is_primitive(items):
        refs.append(items)
    return refs


def _check_type(owner: str, type_name: str, items: str | None) -> None:
    if not type_name:
        raise SchemaError(f"'{owner}' has an empty type")
    if items is not None and type_name != "array":
        raise SchemaError(f"'{owner}' declares items but is of type '{type_name}'")
    if items == "array":
        raise SchemaError(f"'{owner}' uses nested untyped arrays")


def _check_unique(owner: str, kind: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise SchemaError(f"Duplicate {kind} '{name}' in '{owner}'")
        seen.add(name)


class FieldSpec(BaseModel):
    """A typed argument of a function, or a field of an object."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str  # string, number, boolean, array, object, or an ObjectSchema name
    description: str = ""
    required: bool = True
    items: str | None = None  # element type when type == "array"

    @property
    def refs(self) -> list[str]:
        return _type_refs(self.type, self.items)


class ReturnSpec(BaseModel):
    """Return type of a function."""

    model_config = ConfigDict(frozen=True)

    type: str
    description: str = ""
    items: str | None = None

    @property
    def refs(self) -> list[str]:
        return _type_refs(self.type, self.items)


class ObjectSchema(BaseModel):
    """A named object type, e.g. ``User``."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    fields: list[FieldSpec] = []
    # UI metadata only, no effect on invocation.
    is_persistable: bool = False

    @model_validator(mode="after")
    def check_structure(self) -> "ObjectSchema":
        if not self.name:
            raise SchemaError("Object schema name must not be empty")
        _check_unique(self.name, "field", [f.name for f in self.fields])
        for f in self.fields:
            _check_type(f"{self.name}.{f.name}", f.type, f.items)
        return self


class FunctionSchema(BaseModel):
    """Name, description, typed arguments and return type of a function.

    ``objects`` holds every object type the arguments or the return type
    refer to, directly or through other objects.  A reference that cannot
    be resolved within the arena is a ``SchemaError``; cycles are fine.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    arguments: list[FieldSpec] = []
    returns: ReturnSpec | None = None
    objects: list[ObjectSchema] = []

    @model_validator(mode="after")
    def check_structure(self) -> "FunctionSchema":
        if not self.name:
            raise SchemaError("Function name must not be empty")
        _check_unique(self.name, "argument", [a.name for a in self.arguments])
        _check_unique(self.name, "object type", [o.name for o in self.objects])
        for arg in self.arguments:
            _check_type(f"{self.name}.{arg.name}", arg.type, arg.items)
        if self.returns is not None:
            _check_type(f"{self.name} return", self.returns.type, self.returns.items)
        self._resolve_references()
        return self

    def _resolve_references(self) -> None:
        arena = self.object_map()
        pending: list[tuple[str, str]] = []
        for arg in self.arguments:
            pending.extend((ref, f"{self.name}.{arg.name}") for ref in arg.refs)
        if self.returns is not None:
            pending.extend((ref, f"{self.name} return") for ref in self.returns.refs)

        resolved: set[str] = set()
        while pending:
            ref, owner = pending.pop()
            if ref in resolved:
                continue
            obj = arena.get(ref)
            if obj is None:
                raise SchemaError(f"Unknown object type '{ref}' referenced by '{owner}'")
            resolved.add(ref)
            for f in obj.fields:
                pending.extend((r, f"{obj.name}.{f.name}") for r in f.refs)

    def object_map(self) -> dict[str, ObjectSchema]:
        return {obj.name: obj for obj in self.objects}

    @property
    def argument_names(self) -> list[str]:
        return [a.name for a in self.arguments]

    def to_tool_definition(self) -> dict[str, Any]:
        """Expand into the OpenAI function-calling format.

        Object types are inlined.  A type that is already being expanded on
        the current path is emitted as ``{"$ref": "<name>"}`` instead of
        being expanded again.
        """
        arena = self.object_map()
        properties = {}
        required = []
        for arg in self.arguments:
            properties[arg.name] = _expand(arg.type, arg.items, arg.description, arena, ())
            if arg.required:
                required.append(arg.name)

        definition: dict[str, Any] = {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }
        if self.returns is not None:
            definition["function"]["returns"] = _expand(
                self.returns.type, self.returns.items, self.returns.description, arena, ()
            )
        return definition


def _expand(
    type_name: str,
    items: str | None,
    description: str,
    arena: dict[str, ObjectSchema],
    path: tuple[str, ...],
) -> dict[str, Any]:
    if type_name == "array":
        prop: dict[str, Any] = {"type": "array"}
        if items:
            prop["items"] = _expand(items, None, "", arena, path)
    elif is_primitive(type_name):
        prop = {"type": type_name}
    elif type_name in path:
        prop = {"$ref": type_name}
    else:
        obj = arena[type_name]
        inner = path + (type_name,)
        prop = {
            "type": "object",
            "title": obj.name,
            "properties": {
                f.name: _expand(f.type, f.items, f.description, arena, inner)
                for f in obj.fields
            },
            "required": [f.name for f in obj.fields if f.required],
        }
        if obj.description and not description:
            description = obj.description
    if description:
        prop["description"] = description
    return prop
