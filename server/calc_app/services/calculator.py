from __future__ import annotations

import logging
from dataclasses import dataclass

from calc_app.core.config import get_settings
from calc_app.core.exceptions import AppError
from calc_app.models.calculator import CalculatorPreview, CalculatorResult
from calc_app.services.calculator_engine import ERROR_RESULT, calculate, group_thousands, preview

logger = logging.getLogger("calc_app.calculator")


class CalculatorError(AppError):
    status_code = 400
    error_type = "CALCULATOR_ERROR"


@dataclass
class CalculatorService:
    max_expression_length: int = 200

    @classmethod
    def from_settings(cls) -> "CalculatorService":
        settings = get_settings()
        return cls(max_expression_length=settings.calc_max_expression_length)

    def evaluate(self, expression: str) -> CalculatorResult:
        self._ensure_length(expression)

        result = calculate(expression)
        is_error = result == ERROR_RESULT
        if is_error:
            logger.info("calculator.error", extra={"expression_length": len(expression)})

        return CalculatorResult(
            expression=expression,
            result=result,
            formatted=group_thousands(result),
            isError=is_error,
        )

    def preview(self, expression: str) -> CalculatorPreview:
        self._ensure_length(expression)
        return CalculatorPreview(expression=expression, preview=preview(expression))

    def _ensure_length(self, expression: str) -> None:
        if len(expression) > self.max_expression_length:
            raise CalculatorError(
                f"Expression exceeds {self.max_expression_length} characters.",
                details={"length": len(expression)},
            )
