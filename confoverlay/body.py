"""The body decoding protocol and the content it produces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable

from .diagnostics import Diagnostic, DiagnosticCode, Diagnostics
from .pos import Range
from .schema import AttributeSchema, BodySchema


@dataclass(slots=True)
class StaticExpr:
    """An expression whose value is a constant known without evaluation."""

    value: Any
    range: Range = field(default_factory=Range)


@dataclass(slots=True)
class Attribute:
    name: str
    expr: StaticExpr
    range: Range = field(default_factory=Range)
    name_range: Range = field(default_factory=Range)


Attributes = dict[str, Attribute]


@dataclass(slots=True)
class Block:
    type: str
    body: "Body"
    labels: list[str] = field(default_factory=list)
    label_ranges: list[Range] = field(default_factory=list)
    def_range: Range = field(default_factory=Range)
    type_range: Range = field(default_factory=Range)


@dataclass(slots=True)
class BodyContent:
    attributes: Attributes = field(default_factory=dict)
    blocks: list[Block] = field(default_factory=list)
    missing_item_range: Range = field(default_factory=Range)

    def blocks_of_type(self, block_type: str) -> list[Block]:
        return [block for block in self.blocks if block.type == block_type]


class Body(ABC):
    """A configuration body that can be decoded against a schema.

    Every operation returns its diagnostics instead of raising; a result is
    always produced, even if some of it had to be skipped.
    """

    @abstractmethod
    def content(self, schema: BodySchema) -> tuple[BodyContent, Diagnostics]:
        """Decode the body, reporting anything the schema does not call for."""

    @abstractmethod
    def partial_content(self, schema: BodySchema) -> tuple[BodyContent, "Body", Diagnostics]:
        """Decode what the schema calls for and return the rest as a new body.

        Items that the schema does not mention are not errors here; they
        remain visible in the returned body for a later decode with another
        schema.
        """

    @abstractmethod
    def just_attributes(self) -> tuple[Attributes, Diagnostics]:
        """Decode the body as a flat set of attributes, with no blocks allowed."""

    @abstractmethod
    def missing_item_range(self) -> Range:
        """Location to report for items that should exist but do not."""


class EmptyBody(Body):
    def content(self, schema: BodySchema) -> tuple[BodyContent, Diagnostics]:
        content = BodyContent(missing_item_range=self.missing_item_range())
        return content, missing_required(schema.required_attributes(), content.attributes, self.missing_item_range())

    def partial_content(self, schema: BodySchema) -> tuple[BodyContent, Body, Diagnostics]:
        content, diags = self.content(schema)
        return content, self, diags

    def just_attributes(self) -> tuple[Attributes, Diagnostics]:
        return {}, Diagnostics()

    def missing_item_range(self) -> Range:
        return Range()

    def __repr__(self) -> str:
        return "EmptyBody()"


def missing_required(required: Iterable[AttributeSchema], attributes: Attributes, subject: Range) -> Diagnostics:
    diags = Diagnostics()
    for attr_s in required:
        if attr_s.name in attributes:
            continue
        diags.append(
            Diagnostic.error(
                "Missing required argument",
                f'The argument "{attr_s.name}" is required, but no definition was found.',
                subject=subject,
                code=DiagnosticCode.MISSING_REQUIRED_ARGUMENT,
            )
        )
    return diags


__all__ = [
    "StaticExpr",
    "Attribute",
    "Attributes",
    "Block",
    "BodyContent",
    "Body",
    "EmptyBody",
    "missing_required",
]
