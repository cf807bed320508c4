from __future__ import annotations

import pytest

from confoverlay import (
    AttributeSchema,
    BlockHeaderSchema,
    BodyContent,
    BodySchema,
    DiagnosticCode,
    Diagnostics,
    EmptyBody,
    Overlay,
    OverlayBody,
    Range,
    apply_overlays,
    parse_cli_argument,
)


def overlays(*raws):
    result = []
    for raw in raws:
        overlay, diags = parse_cli_argument(raw)
        assert not diags, str(diags)
        result.append(overlay)
    return result


class RecordingOverlay(Overlay):
    """Records the io_mode value it sees, then sets its own."""

    def __init__(self, value, seen):
        self.value = value
        self.seen = seen

    def apply_overlay(self, content, schema):
        attr = content.attributes.get("io_mode")
        self.seen.append(attr.expr.value if attr else None)
        return overlays(f"io_mode={self.value}")[0].apply_overlay(content, schema)

    def partial_apply_overlay(self, content, schema):
        content, diags = self.apply_overlay(content, schema)
        return content, None, diags

    def apply_just_attributes(self, attrs):
        return attrs, Diagnostics()


def test_no_overlays_returns_body_unchanged(parse_body):
    body = parse_body('io_mode = "a"')

    assert apply_overlays(body) is body


def test_overlays_wrap_body(parse_body):
    body = parse_body('io_mode = "a"')
    ov = overlays("io_mode=b")

    wrapped = apply_overlays(body, *ov)

    assert isinstance(wrapped, OverlayBody)
    assert wrapped.inner is body
    assert wrapped.overlays == tuple(ov)


@pytest.mark.parametrize(
    "raws, want",
    [
        (["io_mode=1", "io_mode=2"], "2"),
        (["io_mode=2", "io_mode=1"], "1"),
        (["io_mode=x"], "x"),
        (["io_mode=x", "io_mode=x"], "x"),
    ],
)
def test_later_overlays_win(parse_body, service_schema, raws, want):
    body = parse_body('io_mode = "original"')

    content, diags = apply_overlays(body, *overlays(*raws)).content(service_schema)

    assert not diags
    assert content.attributes["io_mode"].expr.value == want


def test_each_overlay_sees_the_previous_result(parse_body, service_schema):
    seen = []
    body = parse_body('io_mode = "original"')

    apply_overlays(body, RecordingOverlay("a", seen), RecordingOverlay("b", seen)).content(service_schema)

    assert seen == ["original", "a"]


def test_applying_same_overlay_twice_is_idempotent(parse_body, service_schema, listen_schema):
    text = 'io_mode = "a"\nservice "http" "x" { listen_addr = ":1" }'
    ov = overlays("service.http.x.listen_addr=:2", "service.tcp.y.listen_addr=:3")

    once, _ = apply_overlays(parse_body(text), *ov).content(service_schema)
    twice, _ = apply_overlays(parse_body(text), *ov, *ov).content(service_schema)

    def summary(content):
        result = []
        for block in content.blocks:
            nested, diags = block.body.content(listen_schema)
            assert not diags
            result.append((block.labels, nested.attributes["listen_addr"].expr.value))
        return content.attributes["io_mode"].expr.value, result

    assert summary(once) == summary(twice)
    assert summary(once) == ("a", [(["http", "x"], ":2"), (["tcp", "y"], ":3")])


def test_requiredness_is_checked_after_overlays(parse_body, service_schema):
    body = parse_body('service "http" "x" { listen_addr = ":1" }')

    _, diags = apply_overlays(body, *overlays("io_mode=async")).content(service_schema)

    assert not diags


def test_missing_required_argument_is_anchored_at_missing_item_range(parse_body, service_schema):
    body = parse_body('service "http" "x" { listen_addr = ":1" }\n')

    _, diags = apply_overlays(body, *overlays("service.http.x.listen_addr=:2")).content(service_schema)

    assert [d.code for d in diags] == [DiagnosticCode.MISSING_REQUIRED_ARGUMENT]
    assert diags[0].subject == body.missing_item_range()
    assert diags[0].detail == 'The argument "io_mode" is required, but no definition was found.'


def test_errors_are_batched_across_overlays(parse_body, service_schema):
    body = parse_body('io_mode = "a"')
    ov = overlays("nope=1", "io_mode.deep=2", "io_mode=b", "service.x=3")

    content, diags = apply_overlays(body, *ov).content(service_schema)

    assert content.attributes["io_mode"].expr.value == "b"
    assert [d.code for d in diags] == [
        DiagnosticCode.UNEXPECTED_ARGUMENT,
        DiagnosticCode.ATTRIBUTE_USED_AS_PREFIX,
        DiagnosticCode.UNEXPECTED_ARGUMENT,
    ]


def test_overlays_never_remove_content(parse_body, service_schema):
    body = parse_body('io_mode = "a"\nservice "http" "x" { listen_addr = ":1" }')

    content, _ = apply_overlays(body, *overlays("service.tcp.y.listen_addr=:2")).content(service_schema)

    assert content.attributes["io_mode"].expr.value == "a"
    assert [block.labels for block in content.blocks] == [["http", "x"], ["tcp", "y"]]


def test_creates_block_and_appends_in_order(parse_body):
    schema = BodySchema(blocks=(BlockHeaderSchema(type="block", label_names=("name",)),))
    foo_schema = BodySchema(attributes=(AttributeSchema(name="foo", required=True),))
    body = parse_body('block "a" { foo = "a" }')

    content, diags = apply_overlays(body, *overlays("block.b.foo=b")).content(schema)

    assert not diags
    result = []
    for block in content.blocks:
        nested, nested_diags = block.body.content(foo_schema)
        assert not nested_diags
        result.append((block.labels, nested.attributes["foo"].expr.value))
    assert result == [(["a"], "a"), (["b"], "b")]


def test_partial_content_defers_unmatched_overlays(parse_body, listen_schema):
    body = parse_body('io_mode = "a"\nlisten_addr = ":1"')
    first = BodySchema(attributes=(AttributeSchema(name="io_mode", required=True),))
    ov = overlays("listen_addr=:2", "io_mode=b", "unknown=x")

    content, remain, diags = apply_overlays(body, *ov).partial_content(first)

    assert not diags
    assert content.attributes["io_mode"].expr.value == "b"
    assert "listen_addr" not in content.attributes
    assert isinstance(remain, OverlayBody)
    assert remain.overlays == (ov[0], ov[2])

    rest, rest_diags = remain.content(listen_schema)

    assert rest.attributes["listen_addr"].expr.value == ":2"
    assert [d.code for d in rest_diags] == [DiagnosticCode.UNEXPECTED_ARGUMENT]
    assert '"unknown"' in rest_diags[0].detail


def test_partial_content_without_leftovers_returns_plain_remainder(parse_body):
    body = parse_body('io_mode = "a"\nother = "b"')
    schema = BodySchema(attributes=(AttributeSchema(name="io_mode"),))

    _, remain, diags = apply_overlays(body, *overlays("io_mode=b")).partial_content(schema)

    assert not diags
    assert not isinstance(remain, OverlayBody)
    attrs, _ = remain.just_attributes()
    assert list(attrs) == ["other"]


def test_partial_content_checks_original_requiredness(parse_body):
    body = parse_body('other = "b"')
    schema = BodySchema(attributes=(AttributeSchema(name="io_mode", required=True),))

    _, _, diags = apply_overlays(body, *overlays("other=c")).partial_content(schema)

    assert [d.code for d in diags] == [DiagnosticCode.MISSING_REQUIRED_ARGUMENT]


def test_just_attributes_folds_overlays(parse_body):
    body = parse_body('a = "1"\nb = "2"')

    attrs, diags = apply_overlays(body, *overlays("b=3", "c=4", "b=5")).just_attributes()

    assert not diags
    assert {name: attr.expr.value for name, attr in attrs.items()} == {"a": "1", "b": "5", "c": "4"}
    assert attrs["c"].range == Range()


def test_just_attributes_rejects_block_paths(parse_body):
    body = parse_body('a = "1"')

    attrs, diags = apply_overlays(body, *overlays("svc.x.y=1")).just_attributes()

    assert list(attrs) == ["a"]
    assert [d.code for d in diags] == [DiagnosticCode.UNEXPECTED_ARGUMENT]


def test_missing_item_range_is_delegated(parse_body):
    body = parse_body('a = "1"\n')

    assert apply_overlays(body, *overlays("a=2")).missing_item_range() == body.missing_item_range()


def test_empty_body_reports_required_attributes():
    schema = BodySchema(attributes=(AttributeSchema(name="foo", required=True),))

    content, diags = EmptyBody().content(schema)

    assert content == BodyContent()
    assert [d.code for d in diags] == [DiagnosticCode.MISSING_REQUIRED_ARGUMENT]


def test_nested_overlays_on_new_block_still_check_requiredness():
    schema = BodySchema(blocks=(BlockHeaderSchema(type="service", label_names=("name",)),))
    nested_schema = BodySchema(
        attributes=(AttributeSchema(name="listen_addr", required=True), AttributeSchema(name="mode"))
    )

    content, _ = apply_overlays(EmptyBody(), *overlays("service.web.mode=fast")).content(schema)
    nested, diags = content.blocks[0].body.content(nested_schema)

    assert nested.attributes["mode"].expr.value == "fast"
    assert [d.code for d in diags] == [DiagnosticCode.MISSING_REQUIRED_ARGUMENT]
