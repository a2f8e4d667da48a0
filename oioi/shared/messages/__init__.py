from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """
    Changing default pydantic configuration to suit our needs for handling
    the JSON objects of the OIOI protocol
    """

    model_config = ConfigDict(
        # Allow input by alias or field name
        populate_by_name=True,
        # Forbid extra attributes during model initialization
        extra="forbid",
        # Data records are value objects and never change after creation
        frozen=True,
    )
