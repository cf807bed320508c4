"""Decoding bodies into pydantic models.

A model describes the schema of a body through its fields. Plain fields are
attributes, and are required when the pydantic field is required. Fields
declared with :func:`label`, :func:`block` and :func:`remain` instead
receive a block's labels, nested blocks, and whatever a partial decode
leaves behind::

    class Service(BaseModel):
        type: str = label()
        name: str = label()
        listen_addr: str

    class Config(BaseModel):
        io_mode: str = "sync"
        services: list[Service] = block(alias="service", default_factory=list)

Values are validated by pydantic in lax mode, so the strings set by overlays
are converted to whatever type the field declares.
"""

from __future__ import annotations

import logging
import types
from typing import Any, Sequence, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, Field, ValidationError
from pydantic.fields import FieldInfo

from .body import Body
from .diagnostics import Diagnostic, DiagnosticCode, Diagnostics
from .pos import Range
from .schema import AttributeSchema, BlockHeaderSchema, BodySchema

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_KIND_KEY = "confoverlay"


def label(**kwargs: Any) -> Any:
    return Field(json_schema_extra={_KIND_KEY: "label"}, **kwargs)


def block(**kwargs: Any) -> Any:
    return Field(json_schema_extra={_KIND_KEY: "block"}, **kwargs)


def remain(**kwargs: Any) -> Any:
    """Receives the body left over after decoding; the model needs ``arbitrary_types_allowed``."""
    return Field(default=None, json_schema_extra={_KIND_KEY: "remain"}, **kwargs)


def _field_kind(info: FieldInfo) -> str:
    extra = info.json_schema_extra
    if isinstance(extra, dict):
        return str(extra.get(_KIND_KEY, "attribute"))
    return "attribute"


def _field_key(name: str, info: FieldInfo) -> str:
    return info.alias or name


def _block_model(annotation: Any) -> tuple[type[BaseModel], str]:
    origin = get_origin(annotation)
    if origin is list:
        (inner,) = get_args(annotation)
        return _block_model(inner)[0], "list"
    if origin is Union or origin is types.UnionType:
        inner = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(inner) == 1:
            return _block_model(inner[0])[0], "optional"
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation, "single"
    raise TypeError(f"block fields must be a model, an optional model, or a list of models, not {annotation!r}")


def _label_keys(model: type[BaseModel]) -> list[str]:
    return [_field_key(name, info) for name, info in model.model_fields.items() if _field_kind(info) == "label"]


def implied_body_schema(model: type[BaseModel]) -> BodySchema:
    attributes: list[AttributeSchema] = []
    blocks: list[BlockHeaderSchema] = []
    for name, info in model.model_fields.items():
        kind = _field_kind(info)
        key = _field_key(name, info)
        if kind == "attribute":
            attributes.append(AttributeSchema(name=key, required=info.is_required()))
        elif kind == "block":
            nested, _ = _block_model(info.annotation)
            blocks.append(BlockHeaderSchema(type=key, label_names=tuple(_label_keys(nested))))
    return BodySchema(attributes=tuple(attributes), blocks=tuple(blocks))


def decode_body(body: Body, model: type[M], labels: Sequence[str] = ()) -> tuple[M | None, Diagnostics]:
    """Decode ``body`` into an instance of ``model``.

    Returns ``None`` instead of an instance if the decoded values do not
    validate; the reasons are in the diagnostics either way.
    """
    schema = implied_body_schema(model)
    fields = model.model_fields
    remain_name = next((name for name, info in fields.items() if _field_kind(info) == "remain"), None)

    leftover: Body | None = None
    if remain_name is not None:
        content, leftover, diags = body.partial_content(schema)
    else:
        content, diags = body.content(schema)

    data: dict[str, Any] = {}
    ranges: dict[str, Range] = {}
    already_reported: set[str] = {attr_s.name for attr_s in schema.attributes}

    for key, attr in content.attributes.items():
        data[key] = attr.expr.value
        ranges[key] = attr.expr.range
    for key, value in zip(_label_keys(model), labels):
        data[key] = value

    for name, info in fields.items():
        if _field_kind(info) != "block":
            continue
        key = _field_key(name, info)
        nested, multiplicity = _block_model(info.annotation)
        found = content.blocks_of_type(key)
        decoded = []
        for blk in found:
            value, more_diags = decode_body(blk.body, nested, blk.labels)
            diags.extend(more_diags)
            if value is None:
                already_reported.add(key)
            else:
                decoded.append(value)

        if multiplicity == "list":
            data[key] = decoded
            continue
        if len(found) > 1:
            diags.append(
                Diagnostic.error(
                    f"Duplicate {key} block",
                    f'Only one "{key}" block is allowed. Another was defined at {found[0].def_range}.',
                    subject=found[1].def_range,
                    code=DiagnosticCode.DUPLICATE_BLOCK,
                )
            )
        if decoded:
            data[key] = decoded[0]
        elif not found and multiplicity == "single":
            diags.append(
                Diagnostic.error(
                    f"Missing {key} block",
                    f'A "{key}" block is required.',
                    subject=content.missing_item_range,
                    code=DiagnosticCode.MISSING_BLOCK,
                )
            )
            already_reported.add(key)

    if remain_name is not None:
        data[_field_key(remain_name, fields[remain_name])] = leftover

    try:
        instance = model.model_validate(data)
    except ValidationError as e:
        for err in e.errors():
            key = str(err["loc"][0]) if err["loc"] else ""
            if err["type"] == "missing" and key in already_reported:
                continue
            subject = ranges.get(key)
            if subject is None or subject.empty:
                subject = content.missing_item_range
            diags.append(
                Diagnostic.error(
                    "Unsuitable value",
                    f'Invalid value for "{key}": {err["msg"]}.',
                    subject=subject,
                    code=DiagnosticCode.UNSUITABLE_VALUE,
                )
            )
        return None, diags

    logger.debug(f"Decoded {model.__name__} with {len(content.attributes)} attribute(s), {len(content.blocks)} block(s)")
    return instance, diags


__all__ = ["label", "block", "remain", "implied_body_schema", "decode_body"]
