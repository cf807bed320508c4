"""Overlays and the body wrapper that applies them during decoding."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .body import Attributes, Body, BodyContent, missing_required
from .diagnostics import Diagnostics
from .pos import Range
from .schema import BodySchema

logger = logging.getLogger(__name__)


class Overlay(ABC):
    """An object that can modify the result of decoding a body.

    Overlays are applied to a body with :func:`apply_overlays`, and then get
    an opportunity to add or replace attributes and blocks in whatever
    content is decoded from it.
    """

    @abstractmethod
    def apply_overlay(self, content: BodyContent, schema: BodySchema) -> tuple[BodyContent, Diagnostics]:
        """Fold this overlay into content decoded with the given schema.

        Returns errors if the schema does not call for any of the changes
        the overlay represents. These are phrased as if the overlay itself
        were invalid, since overlays usually come from end-user input.

        Implementations may modify ``content`` in place and return it.
        """

    @abstractmethod
    def partial_apply_overlay(
        self, content: BodyContent, schema: BodySchema
    ) -> tuple[BodyContent, Overlay | None, Diagnostics]:
        """Like :meth:`apply_overlay`, but tolerant of an incomplete schema.

        Applies as much as the schema allows and returns an overlay carrying
        the changes it could not apply, or ``None`` once everything has been
        applied.
        """

    @abstractmethod
    def apply_just_attributes(self, attrs: Attributes) -> tuple[Attributes, Diagnostics]:
        """Apply the attribute changes this overlay represents to a flat attribute map.

        Any change that would need a block is an error, since there are no
        blocks in this mode.
        """


def apply_overlays(body: Body, *overlays: Overlay) -> Body:
    """Wrap ``body`` so that decoding it incorporates the given overlays.

    Overlays are applied in the given order, each one seeing the result of
    the ones before it.

    The wrapped body must be valid for the decoding schema except that
    required attributes are not enforced on it. Requiredness is checked on
    the result of applying the overlays instead.
    """
    if not overlays:
        return body
    return OverlayBody(body, overlays)


class OverlayBody(Body):
    def __init__(self, inner: Body, overlays: tuple[Overlay, ...] | list[Overlay]):
        self.inner = inner
        self.overlays = tuple(overlays)

    def content(self, schema: BodySchema) -> tuple[BodyContent, Diagnostics]:
        mod_schema = schema.without_required()

        content, diags = self.inner.content(mod_schema)
        for overlay in self.overlays:
            logger.debug(f"Applying {overlay!r}")
            content, more_diags = overlay.apply_overlay(content, mod_schema)
            diags.extend(more_diags)

        return self._prepare_content(content, schema, diags)

    def partial_content(self, schema: BodySchema) -> tuple[BodyContent, Body, Diagnostics]:
        mod_schema = schema.without_required()

        content, remain, diags = self.inner.partial_content(mod_schema)
        remain_overlays: list[Overlay] = []
        for overlay in self.overlays:
            logger.debug(f"Partially applying {overlay!r}")
            content, remain_overlay, more_diags = overlay.partial_apply_overlay(content, mod_schema)
            diags.extend(more_diags)
            if remain_overlay is not None:
                remain_overlays.append(remain_overlay)

        if remain_overlays:
            logger.debug(f"Deferring {len(remain_overlays)} overlay(s) to the remaining body")
        remain = apply_overlays(remain, *remain_overlays)

        content, diags = self._prepare_content(content, schema, diags)
        return content, remain, diags

    def just_attributes(self) -> tuple[Attributes, Diagnostics]:
        attrs, diags = self.inner.just_attributes()
        for overlay in self.overlays:
            attrs, more_diags = overlay.apply_just_attributes(attrs)
            diags.extend(more_diags)
        return attrs, diags

    def missing_item_range(self) -> Range:
        return self.inner.missing_item_range()

    def _prepare_content(
        self, result: BodyContent, schema: BodySchema, diags: Diagnostics
    ) -> tuple[BodyContent, Diagnostics]:
        diags.extend(missing_required(schema.required_attributes(), result.attributes, self.missing_item_range()))
        return result, diags

    def __repr__(self) -> str:
        return f"OverlayBody({self.inner!r}, {list(self.overlays)!r})"


__all__ = ["Overlay", "apply_overlays", "OverlayBody"]
