from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class APIModel(BaseModel):
    """Wire model: camelCase on output, either spelling accepted on input."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
