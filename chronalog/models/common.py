from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail

    @classmethod
    def of(cls, code: str, message: str) -> dict:
        return cls(error=ErrorDetail(code=code, message=message)).model_dump()


class ListResponse(BaseModel):
    items: list[dict]
    total: int
