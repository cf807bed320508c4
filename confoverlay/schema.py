"""Schema definitions describing what a body is expected to contain."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from .utils import valid_identifier


class AttributeSchema(BaseModel):
    """An attribute a body may (or, if ``required``, must) define."""

    model_config = ConfigDict(frozen=True)

    name: str
    required: bool = False


class BlockHeaderSchema(BaseModel):
    """A block type and the names of the labels each block of that type carries."""

    model_config = ConfigDict(frozen=True)

    type: str
    label_names: tuple[str, ...] = ()

    @field_validator("label_names")
    @classmethod
    def _check_label_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for name in value:
            if not valid_identifier(name):
                raise ValueError(f"label name {name!r} is not a valid identifier")
        return value


class BodySchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    attributes: tuple[AttributeSchema, ...] = ()
    blocks: tuple[BlockHeaderSchema, ...] = ()

    def attribute(self, name: str) -> AttributeSchema | None:
        for attr_s in self.attributes:
            if attr_s.name == name:
                return attr_s
        return None

    def block(self, block_type: str) -> BlockHeaderSchema | None:
        for block_s in self.blocks:
            if block_s.type == block_type:
                return block_s
        return None

    def required_attributes(self) -> list[AttributeSchema]:
        return [attr_s for attr_s in self.attributes if attr_s.required]

    def without_required(self) -> "BodySchema":
        """Copy of this schema in which every attribute is optional."""
        if not self.attributes:
            return self
        relaxed = tuple(attr_s.model_copy(update={"required": False}) for attr_s in self.attributes)
        return self.model_copy(update={"attributes": relaxed})


__all__ = ["AttributeSchema", "BlockHeaderSchema", "BodySchema"]
