"""Syntax tree nodes for parsed configuration files."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from confoverlay.body import Attribute, Attributes, Block, Body, BodyContent, StaticExpr, missing_required
from confoverlay.diagnostics import Diagnostic, DiagnosticCode, Diagnostics
from confoverlay.pos import Range
from confoverlay.schema import BlockHeaderSchema, BodySchema


@dataclass(slots=True)
class SyntaxAttribute:
    name: str
    value: str | int | float | bool
    range: Range
    name_range: Range
    value_range: Range

    def as_attribute(self) -> Attribute:
        return Attribute(
            name=self.name,
            expr=StaticExpr(self.value, self.value_range),
            range=self.range,
            name_range=self.name_range,
        )


@dataclass(slots=True)
class SyntaxBlock:
    type: str
    labels: list[str]
    body: "SyntaxBody"
    type_range: Range
    label_ranges: list[Range]
    open_brace_range: Range

    def as_block(self) -> Block:
        return Block(
            type=self.type,
            body=self.body,
            labels=list(self.labels),
            label_ranges=list(self.label_ranges),
            def_range=Range(self.type_range.filename, self.type_range.start, self.open_brace_range.end),
            type_range=self.type_range,
        )


@dataclass(slots=True)
class SyntaxBody(Body):
    attributes: dict[str, SyntaxAttribute] = field(default_factory=dict)
    blocks: list[SyntaxBlock] = field(default_factory=list)
    src_range: Range = field(default_factory=Range)
    end_range: Range = field(default_factory=Range)
    # names already claimed by an earlier partial_content call
    hidden_attrs: frozenset[str] = frozenset()
    hidden_blocks: frozenset[str] = frozenset()

    def content(self, schema: BodySchema) -> tuple[BodyContent, Diagnostics]:
        content, remain, diags = self._partial_content(schema)

        for attr in remain._visible_attributes():
            diags.append(
                Diagnostic.error(
                    "Unsupported argument",
                    f'An argument named "{attr.name}" is not expected here.',
                    subject=attr.name_range,
                    code=DiagnosticCode.UNSUPPORTED_ARGUMENT,
                )
            )
        for block in remain._visible_blocks():
            diags.append(
                Diagnostic.error(
                    "Unsupported block type",
                    f'Blocks of type "{block.type}" are not expected here.',
                    subject=block.type_range,
                    code=DiagnosticCode.UNSUPPORTED_BLOCK_TYPE,
                )
            )
        return content, diags

    def partial_content(self, schema: BodySchema) -> tuple[BodyContent, Body, Diagnostics]:
        return self._partial_content(schema)

    def _partial_content(self, schema: BodySchema) -> tuple[BodyContent, "SyntaxBody", Diagnostics]:
        diags = Diagnostics()
        content = BodyContent(missing_item_range=self.missing_item_range())

        for attr_s in schema.attributes:
            attr = self.attributes.get(attr_s.name)
            if attr is None or attr_s.name in self.hidden_attrs:
                continue
            content.attributes[attr_s.name] = attr.as_attribute()
        diags.extend(missing_required(schema.required_attributes(), content.attributes, self.missing_item_range()))

        for block in self._visible_blocks():
            block_s = schema.block(block.type)
            if block_s is None:
                continue
            label_diag = self._check_labels(block, block_s)
            if label_diag is not None:
                diags.append(label_diag)
                continue
            content.blocks.append(block.as_block())

        remain = replace(
            self,
            hidden_attrs=self.hidden_attrs | {attr_s.name for attr_s in schema.attributes},
            hidden_blocks=self.hidden_blocks | {block_s.type for block_s in schema.blocks},
        )
        return content, remain, diags

    def just_attributes(self) -> tuple[Attributes, Diagnostics]:
        diags = Diagnostics()
        for block in self._visible_blocks():
            diags.append(
                Diagnostic.error(
                    "Unexpected block",
                    f'Blocks are not allowed here, but found a "{block.type}" block.',
                    subject=block.type_range,
                    code=DiagnosticCode.UNEXPECTED_BLOCK,
                )
            )
        attrs = {attr.name: attr.as_attribute() for attr in self._visible_attributes()}
        return attrs, diags

    def missing_item_range(self) -> Range:
        return self.end_range

    def _visible_attributes(self) -> list[SyntaxAttribute]:
        return [attr for name, attr in self.attributes.items() if name not in self.hidden_attrs]

    def _visible_blocks(self) -> list[SyntaxBlock]:
        return [block for block in self.blocks if block.type not in self.hidden_blocks]

    def _check_labels(self, block: SyntaxBlock, block_s: BlockHeaderSchema) -> Diagnostic | None:
        want = len(block_s.label_names)
        names = ", ".join(block_s.label_names)
        if len(block.labels) < want:
            return Diagnostic.error(
                f"Missing name for {block.type}",
                f"All {block.type} blocks must have {want} labels ({names}).",
                subject=block.open_brace_range,
                code=DiagnosticCode.MISSING_BLOCK_LABEL,
            )
        if len(block.labels) > want:
            if want == 0:
                detail = f"No labels are expected for {block.type} blocks."
            else:
                detail = f"Only {want} labels ({names}) are expected for {block.type} blocks."
            return Diagnostic.error(
                f"Extraneous label for {block.type}",
                detail,
                subject=block.label_ranges[want],
                code=DiagnosticCode.EXTRANEOUS_BLOCK_LABEL,
            )
        return None


__all__ = ["SyntaxAttribute", "SyntaxBlock", "SyntaxBody"]
