"""Shared schema pieces — media references and the ORM-reading base model."""

from pydantic import BaseModel, ConfigDict


class OrmModel(BaseModel):
    """Base for response schemas built from ORM rows."""
    model_config = ConfigDict(from_attributes=True)


class ImageRef(BaseModel):
    """A media-host asset as stored on rows."""
    url: str
    public_id: str | None = None


def dump(schema: type[BaseModel], rows) -> list[dict] | dict:
    """Serialize one ORM row or a list of rows through a response schema."""
    if isinstance(rows, list):
        return [schema.model_validate(r).model_dump(mode="json") for r in rows]
    return schema.model_validate(rows).model_dump(mode="json")


def dump_with(
    schema: type[BaseModel],
    pairs,
    key: str,
    related_schema: type[BaseModel],
) -> list[dict]:
    """Serialize (row, related-or-None) pairs, nesting the related row under key."""
    return [
        {**dump(schema, row), key: dump(related_schema, related) if related else None}
        for row, related in pairs
    ]
