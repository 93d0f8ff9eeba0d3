import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from eventtix.api.deps import get_event_settings
from eventtix.core.errors import DomainError, NotVerifiedError
from eventtix.db.session import get_db
from eventtix.schemas.ticket import BuyTicketOut, VerificationOut
from eventtix.services.event_config_service import EventSettings
from eventtix.services.purchase_service import PurchaseRequest, ReceiptUpload, purchase_ticket
from eventtix.services.verification_service import check_verification

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tickets"])


@router.post("/buy-ticket", response_model=BuyTicketOut)
def buy_ticket(
    buyerName: Optional[str] = Form(None),
    buyerEmail: Optional[str] = Form(None),
    buyerPhone: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    totalPrice: Optional[str] = Form(None),
    bankTransferSlip: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    event: EventSettings = Depends(get_event_settings),
):
    """Multipart purchase form. Answers 400/409/500 as {"error": ...}."""
    receipt = None
    if bankTransferSlip is not None:
        receipt = ReceiptUpload(
            filename=bankTransferSlip.filename or "",
            content_type=bankTransferSlip.content_type or "",
            content=bankTransferSlip.file.read(),
        )
    req = PurchaseRequest(
        buyer_name=buyerName,
        buyer_email=buyerEmail,
        buyer_phone=buyerPhone,
        category=category,
        quantity=quantity,
        total_price=totalPrice,
        receipt=receipt,
    )
    try:
        result = purchase_ticket(db, event, req)
    except DomainError as e:
        if e.http_status >= 500:
            return JSONResponse({"error": "Failed to process ticket purchase"}, status_code=e.http_status)
        return JSONResponse({"error": e.message}, status_code=e.http_status)
    except Exception:
        logger.exception("Buy ticket error")
        return JSONResponse({"error": "Failed to process ticket purchase"}, status_code=500)
    return BuyTicketOut(success=True, message=result.message, ticketCode=result.ticket_code)


@router.get("/verify-ticket", response_model=VerificationOut)
def verify_ticket(code: Optional[str] = None, db: Session = Depends(get_db)):
    """Entry check used by venue scanners; the ticket QR code points here."""
    try:
        projection = check_verification(db, code)
    except NotVerifiedError as e:
        return JSONResponse({"valid": False, "status": e.status, "error": e.message}, status_code=e.http_status)
    except DomainError as e:
        return JSONResponse({"valid": False, "error": e.message}, status_code=e.http_status)
    return {"valid": True, "ticket": projection}
