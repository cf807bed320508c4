import sys
from pathlib import Path

import pytest

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent

# Make the package and the example CLI importable without installing
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


from confoverlay import AttributeSchema, BlockHeaderSchema, BodySchema
from confoverlay.syntax import SyntaxBody, parse_config


@pytest.fixture
def parse_body():
    """Parse configuration text, failing the test on syntax errors."""

    def _parse(text: str, filename: str = "test.conf") -> SyntaxBody:
        file, diags = parse_config(text, filename=filename)
        assert not diags.has_errors(), str(diags)
        assert file is not None
        return file.body

    return _parse


@pytest.fixture
def service_schema() -> BodySchema:
    return BodySchema(
        attributes=(AttributeSchema(name="io_mode", required=True),),
        blocks=(BlockHeaderSchema(type="service", label_names=("type", "name")),),
    )


@pytest.fixture
def listen_schema() -> BodySchema:
    return BodySchema(attributes=(AttributeSchema(name="listen_addr", required=True),))
