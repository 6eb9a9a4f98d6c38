"""Shared pydantic base for records exchanged with clients and the document store."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model whose wire field names are camelCase.

    Python code uses snake_case attributes; JSON payloads and stored
    documents use the camelCase aliases (``planId``, ``autoRenew``, ...).
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
