"""
Goal Matrix Endpoints

Stateless calculator for the free-form goal grid: the client keeps the
grid and posts it back to get totals, toggle breaks or export it.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel, ConfigDict, Field, model_validator
import structlog

from goaltracker.config import get_settings
from goaltracker.engine import MatrixRow, MatrixSheet
from goaltracker.engine.matrix import MATRIX_DEFAULT_END_HOUR, MATRIX_DEFAULT_START_HOUR
from goaltracker.reporting import ReportFormat, matrix_report
from goaltracker.serving.api.routes.reports import download

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()


class MatrixRowPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: str = ""
    values: Dict[int, float] = {}
    sales: Dict[int, float] = {}
    breaks: List[int] = []
    manual_total_sale: Optional[float] = Field(default=None, ge=0)


class MatrixPayload(BaseModel):
    start_hour: int = Field(default=MATRIX_DEFAULT_START_HOUR, ge=0, le=23)
    end_hour: int = Field(default=MATRIX_DEFAULT_END_HOUR, ge=0, le=23)
    rows: List[MatrixRowPayload] = []

    @model_validator(mode="after")
    def check_order(self) -> "MatrixPayload":
        if self.start_hour > self.end_hour:
            raise ValueError("start_hour must not be after end_hour")
        return self

    def to_sheet(self) -> MatrixSheet:
        rows = []
        for row in self.rows:
            kwargs = {"id": row.id} if row.id else {}
            rows.append(MatrixRow(
                name=row.name,
                values=dict(row.values),
                sales=dict(row.sales),
                breaks=set(row.breaks),
                manual_total_sale=row.manual_total_sale,
                **kwargs,
            ))
        return MatrixSheet(self.start_hour, self.end_hour, rows)

    @classmethod
    def from_sheet(cls, sheet: MatrixSheet) -> "MatrixPayload":
        return cls(
            start_hour=sheet.start_hour,
            end_hour=sheet.end_hour,
            rows=[
                MatrixRowPayload(
                    id=row.id,
                    name=row.name,
                    values=row.values,
                    sales=row.sales,
                    breaks=sorted(row.breaks),
                    manual_total_sale=row.manual_total_sale,
                )
                for row in sheet.rows
            ],
        )


class MatrixRowSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row_id: str
    name: str
    goal: float
    sales: float
    difference: float
    compliance: float
    remaining: float
    surplus: float
    manual: bool


class MatrixTotalsResponse(BaseModel):
    sheet: MatrixPayload
    rows: List[MatrixRowSummaryResponse]
    col_totals: Dict[int, float]
    col_sales: Dict[int, float]
    grand_total: float
    grand_sales: float
    difference: float


def totals_response(sheet: MatrixSheet) -> MatrixTotalsResponse:
    totals = sheet.totals()
    return MatrixTotalsResponse(
        sheet=MatrixPayload.from_sheet(sheet),
        rows=[MatrixRowSummaryResponse.model_validate(item) for item in sheet.summaries()],
        col_totals=totals.col_totals,
        col_sales=totals.col_sales,
        grand_total=totals.grand_total,
        grand_sales=totals.grand_sales,
        difference=totals.difference,
    )


@router.get("/new", response_model=MatrixTotalsResponse)
async def new_matrix() -> MatrixTotalsResponse:
    """Empty grid with the default hours and rows."""
    return totals_response(MatrixSheet())


@router.post("/totals", response_model=MatrixTotalsResponse)
async def matrix_totals(payload: MatrixPayload) -> MatrixTotalsResponse:
    return totals_response(payload.to_sheet())


@router.post("/column-break/{hour}", response_model=MatrixTotalsResponse)
async def toggle_column_break(hour: int, payload: MatrixPayload) -> MatrixTotalsResponse:
    """Clear the break from every row if all have it, otherwise set it on all."""
    sheet = payload.to_sheet()
    sheet.toggle_column_break(hour)
    logger.debug("Column break toggled", hour=hour, rows=len(sheet.rows))
    return totals_response(sheet)


@router.post("/report.{fmt}")
async def download_matrix_report(fmt: ReportFormat, payload: MatrixPayload) -> Response:
    return download(matrix_report(payload.to_sheet(), fmt, currency=settings.tracker.currency))
