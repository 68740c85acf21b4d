from pydantic import BaseModel, Field


class CalculatorResult(BaseModel):
    expression: str = Field(..., description="The expression exactly as it was submitted.")
    result: str = Field(..., description="Display string of the evaluated result, or 'Error'.")
    formatted: str = Field(..., description="The result with thousands separators for display.")
    isError: bool = Field(False, description="Whether the expression could not be evaluated.")


class CalculatorPreview(BaseModel):
    expression: str = Field(..., description="The partially typed expression.")
    preview: str = Field("", description="Live result, empty when no preview should be shown.")
