from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response

from ..errors import ValidationFailed
from ..services.reports import render_staff_csv, today

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/staff/export.csv")
def staff_export_csv(request: Request, date: Optional[str] = Query(default=None, description="YYYY-MM-DD")):
    """Staff summary + reservations for one day as a CSV download."""
    day = date or today()
    try:
        csv_text = render_staff_csv(request.app.state.ctx.store, day)
    except ValidationFailed as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="staff-report-{day}.csv"'},
    )
