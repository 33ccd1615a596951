"""
Shared base for HTTP request and response bodies
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, like the progress frames; snake_case input is still accepted"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
