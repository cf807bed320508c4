"""Overlays for block-structured configuration.

An overlay contributes new arguments and blocks to an existing body, or
replaces ones it already has, without rewriting the original document. The
typical use is letting command line options such as
``--service.http.web_proxy.listen_addr=:8080`` override settings from a
configuration file.

Applying overlays implies some constraints on the configuration language
beyond those of plain schema-driven decoding. They depend on the overlay
implementation; see :func:`confoverlay.cli_args.parse_cli_argument`.
"""

from .pos import Pos, Range
from .diagnostics import Diagnostic, DiagnosticCode, Diagnostics, Severity
from .schema import AttributeSchema, BlockHeaderSchema, BodySchema
from .body import Attribute, Attributes, Block, Body, BodyContent, EmptyBody, StaticExpr
from .overlay import Overlay, OverlayBody, apply_overlays
from .cli_args import ExtractConfig, PathOverlay, extract_cli_options, parse_cli_argument
from .decode import block, decode_body, implied_body_schema, label, remain

__all__ = [
    "Pos",
    "Range",
    "Diagnostic",
    "DiagnosticCode",
    "Diagnostics",
    "Severity",
    "AttributeSchema",
    "BlockHeaderSchema",
    "BodySchema",
    "Attribute",
    "Attributes",
    "Block",
    "Body",
    "BodyContent",
    "EmptyBody",
    "StaticExpr",
    "Overlay",
    "OverlayBody",
    "apply_overlays",
    "ExtractConfig",
    "PathOverlay",
    "extract_cli_options",
    "parse_cli_argument",
    "block",
    "decode_body",
    "implied_body_schema",
    "label",
    "remain",
]
