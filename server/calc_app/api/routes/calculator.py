from fastapi import APIRouter, Depends, Query

from calc_app.models.calculator import CalculatorPreview, CalculatorResult
from calc_app.services.calculator import CalculatorService

router = APIRouter(prefix="/calc", tags=["calculator"])


def get_calculator_service() -> CalculatorService:
    return CalculatorService.from_settings()


@router.get("", response_model=CalculatorResult)
async def evaluate_calculator_expression(
    query: str = Query(..., description="Arithmetic expression to evaluate, e.g. (1+2)×3."),
    service: CalculatorService = Depends(get_calculator_service),
) -> CalculatorResult:
    return service.evaluate(query)


@router.get("/preview", response_model=CalculatorPreview)
async def preview_calculator_expression(
    query: str = Query(..., description="Partially typed expression to preview."),
    service: CalculatorService = Depends(get_calculator_service),
) -> CalculatorPreview:
    return service.preview(query)
