# cafe_orders/handlers/analytics_handlers.py
from fastapi import APIRouter, Depends, Response
from ..models.analytics import AnalyticsReport, Granularity
from ..services import ReportService
from .base_handler import get_report_service, require_admin

router = APIRouter(prefix="/api/analytics", tags=["analytics"], dependencies=[Depends(require_admin)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/summary", response_model=AnalyticsReport)
async def get_summary(granularity: Granularity = Granularity.HOUR,
                      service: ReportService = Depends(get_report_service)):
    return await service.get_report(granularity)


@router.get("/export")
async def export_report(granularity: Granularity = Granularity.HOUR,
                        service: ReportService = Depends(get_report_service)):
    content = await service.generate_excel_report(granularity)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="sales-{granularity.value}.xlsx"'}
    )
