from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema whose JSON field names are camelCase. Snake case is accepted on input too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorDetail(CamelModel):
    message: str
    status_code: int


class ErrorResponse(BaseModel):
    error: ErrorDetail
