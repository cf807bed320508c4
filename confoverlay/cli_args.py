"""Overlays built from ``--path.to.setting=value`` command line arguments."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import NotRequired, Optional, Sequence, TypedDict

from .body import Attribute, Attributes, Block, BodyContent, EmptyBody, StaticExpr
from .diagnostics import Diagnostic, DiagnosticCode, Diagnostics
from .overlay import Overlay, apply_overlays
from .pos import Range
from .schema import BodySchema
from .utils import resolve_config, valid_identifier

logger = logging.getLogger(__name__)


def parse_cli_argument(raw: str) -> tuple[Optional["PathOverlay"], Diagnostics]:
    """Parse ``path.to.setting=value`` into an overlay.

    The part before the first equals sign is a sequence of dot-separated
    identifiers describing a traversal through the configuration to an
    argument to set or override. Everything after it is the string value to
    set, and may itself contain dots or equals signs.

    The resulting overlay expects a configuration language where:

        - Blocks are uniquely identified by their type and labels. If a body
          has several blocks with the same header, only the first one in
          source order is overridden.

        - Argument names, block types and block labels are all identifiers.

        - Every argument that can be overridden accepts a string, directly or
          through a type conversion.

    Traversing through a block that the schema allows but the configuration
    does not contain creates a new block with the given labels, containing
    only the given argument.

    Overridden values have no source location: their ranges are the empty
    ``Range()``.
    """
    diags = Diagnostics()
    eq = raw.find("=")
    if eq < 1:  # no equals sign, or nothing before it
        diags.append(
            Diagnostic.error(
                "Invalid argument",
                f'Invalid argument "{raw}": must be a configuration setting, followed by an equals sign, '
                "and then a value for that setting.",
                code=DiagnosticCode.INVALID_ARGUMENT_SYNTAX,
            )
        )
        return None, diags
    path, value = raw[:eq], raw[eq + 1 :]

    steps = path.split(".")
    for step in steps:
        if not valid_identifier(step):
            diags.append(
                Diagnostic.error(
                    "Invalid argument",
                    f'Invalid component "{step}" in argument "{path}": dot-separated parts must be a letter '
                    "followed by zero or more letters, digits, or underscores.",
                    code=DiagnosticCode.INVALID_IDENTIFIER_COMPONENT,
                )
            )
    if diags.has_errors():
        return None, diags

    return PathOverlay(full_path=path, steps=tuple(steps), value=value), diags


class ExtractConfig(TypedDict):
    prefix: NotRequired[str]
    terminator: NotRequired[str]
    keep_consumed: NotRequired[bool]


class ExtractConfigRequired(TypedDict):
    prefix: str
    terminator: str
    keep_consumed: bool


DEFAULT_EXTRACT_CONFIG: ExtractConfigRequired = {
    "prefix": "--",
    "terminator": "--",
    "keep_consumed": False,
}


def extract_cli_options(
    args: Sequence[str], schema: BodySchema, config: Optional[ExtractConfig] = None
) -> tuple[list["PathOverlay"], list[str], Diagnostics]:
    """Pull configuration overlays out of a list of command line arguments.

    Any argument with the ``--`` prefix whose first name matches an attribute
    or block type in ``schema`` is parsed with :func:`parse_cli_argument`.
    Arguments after a literal ``--`` are never interpreted as overlays.

    Returns the overlays, the arguments that were not consumed as overlays
    (in their original order, and including the ``--`` terminator) so they
    can go on to ordinary option parsing, and any diagnostics. With
    ``keep_consumed`` set the returned arguments are the full input instead.
    """
    _config = resolve_config(config or {}, DEFAULT_EXTRACT_CONFIG)
    prefix, terminator = _config["prefix"], _config["terminator"]
    remain: list[str] = []
    overlays: list[PathOverlay] = []
    diags = Diagnostics()

    for i, arg in enumerate(args):
        if arg == terminator:
            remain.extend(args[i:])
            break
        if not arg.startswith(prefix):
            remain.append(arg)
            continue
        raw = arg[len(prefix) :]
        match = re.split(r"[.=]", raw, maxsplit=1)[0]
        if schema.attribute(match) is None and schema.block(match) is None:
            remain.append(arg)
            continue
        overlay, more_diags = parse_cli_argument(raw)
        diags.extend(more_diags)
        if overlay is not None:
            logger.debug(f"Extracted overlay for {overlay.full_path!r} from {arg!r}")
            overlays.append(overlay)

    if _config["keep_consumed"]:
        return overlays, list(args), diags
    return overlays, remain, diags


@dataclass(frozen=True, slots=True)
class PathOverlay(Overlay):
    """Sets the attribute at the end of a dot-separated path to a literal string."""

    full_path: str  # as originally given, for error messages
    steps: tuple[str, ...]
    value: str

    def __post_init__(self):
        if not self.steps:
            raise ValueError("PathOverlay needs at least one step")

    def apply_overlay(self, content: BodyContent, schema: BodySchema) -> tuple[BodyContent, Diagnostics]:
        ret, remain, diags = self.partial_apply_overlay(content, schema)
        if remain is not None:
            # the schema accepted no part of our path
            diags.append(self._invalid_arg_error())
        return ret, diags

    def partial_apply_overlay(
        self, content: BodyContent, schema: BodySchema
    ) -> tuple[BodyContent, Overlay | None, Diagnostics]:
        diags = Diagnostics()
        name = self.steps[0]

        if schema.attribute(name) is not None:
            if len(self.steps) != 1:
                diags.append(self._attribute_prefix_error(name))
                return content, None, diags
            content.attributes[name] = self._attribute(name)
            return content, None, diags

        block_s = schema.block(name)
        if block_s is not None:
            # the type, one step per label, and at least one more to set inside the block
            need_step_count = 1 + len(block_s.label_names) + 1
            if len(self.steps) < need_step_count:
                diags.append(self._invalid_arg_error())
                return content, None, diags

            want_labels = list(self.steps[1 : len(block_s.label_names) + 1])
            sub_overlay = self._sub_overlay(self.steps[len(want_labels) + 1 :])
            for block in content.blocks:
                if block.type != block_s.type or not self._labels_match(block.labels, want_labels):
                    continue
                block.body = apply_overlays(block.body, sub_overlay)
                return content, None, diags

            logger.debug(f"No {block_s.type} block labelled {want_labels} for {self.full_path!r}; creating one")
            content.blocks.append(
                Block(
                    type=block_s.type,
                    body=apply_overlays(EmptyBody(), sub_overlay),
                    labels=want_labels,
                    label_ranges=[Range() for _ in want_labels],
                )
            )
            return content, None, diags

        # Not something this schema calls for; maybe a later schema will.
        return content, self, diags

    def apply_just_attributes(self, attrs: Attributes) -> tuple[Attributes, Diagnostics]:
        diags = Diagnostics()
        if len(self.steps) != 1:
            # there are no blocks to traverse in this mode
            diags.append(self._invalid_arg_error())
            return attrs, diags

        attrs[self.steps[0]] = self._attribute(self.steps[0])
        return attrs, diags

    def _attribute(self, name: str) -> Attribute:
        return Attribute(name=name, expr=StaticExpr(self.value, Range()))

    def _sub_overlay(self, remaining_steps: tuple[str, ...]) -> "PathOverlay":
        return replace(self, steps=remaining_steps)

    @staticmethod
    def _labels_match(a: Sequence[str], b: Sequence[str]) -> bool:
        return list(a) == list(b)

    def _invalid_arg_error(self) -> Diagnostic:
        return Diagnostic.error(
            "Invalid argument",
            f'Unexpected argument "{self.full_path}".',
            code=DiagnosticCode.UNEXPECTED_ARGUMENT,
        )

    def _attribute_prefix_error(self, name: str) -> Diagnostic:
        return Diagnostic.error(
            "Invalid argument",
            f'Unexpected argument "{self.full_path}": "{name}" is an argument, so it cannot be followed by '
            "further dot-separated parts.",
            code=DiagnosticCode.ATTRIBUTE_USED_AS_PREFIX,
        )


__all__ = [
    "parse_cli_argument",
    "extract_cli_options",
    "ExtractConfig",
    "DEFAULT_EXTRACT_CONFIG",
    "PathOverlay",
]
