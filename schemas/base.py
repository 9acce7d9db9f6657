from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body accepting camelCase (frontend) or snake_case keys."""

    model_config = {"populate_by_name": True, "alias_generator": to_camel}
