from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from app.core.auth import AccountContext, get_current_account
from app.db.session import get_store
from app.db.store import DocumentStore
from app.schemas.report import GstReport
from app.services.export_service import ExportService, export_filename
from app.services.report_service import ReportService

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@router.get("/gstr3b", response_model=GstReport)
async def get_gstr3b(
    month: int = Query(..., description="Financial year month, 1 = April ... 12 = March"),
    fy: int = Query(..., description="Calendar year the financial year starts in"),
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """GSTR-3B summary, invoice rows, customer rollup and compliance warnings"""
    return await ReportService(store).gstr3b(account.account_id, month, fy)

@router.get("/gstr3b/export")
async def export_gstr3b(
    month: int = Query(...),
    fy: int = Query(...),
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Download the GSTR-3B workbook"""
    report = await ReportService(store).gstr3b(account.account_id, month, fy)
    content = ExportService().build_gstr3b_workbook(report)
    return _xlsx_response(content, export_filename(report.business.business_name, "GSTR3B", month, fy))

@router.get("/gstr2a/export")
async def export_gstr2a(
    month: int = Query(...),
    fy: int = Query(...),
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Download the GSTR-2A / ITC reconciliation template"""
    report = await ReportService(store).gstr3b(account.account_id, month, fy)
    content = ExportService().build_gstr2a_workbook(report)
    return _xlsx_response(content, export_filename(report.business.business_name, "GSTR2A_ITC", month, fy))
