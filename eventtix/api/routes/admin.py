from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from eventtix.api.deps import get_event_settings, require_admin
from eventtix.core.errors import DomainError
from eventtix.db.session import get_db
from eventtix.models.media import MediaFile
from eventtix.models.ticket import TICKET_STATUSES, Ticket
from eventtix.models.user import User
from eventtix.schemas.event_config import AvailabilityOut, CategoryOut, EventConfigIn, EventConfigOut, MediaOut
from eventtix.schemas.ticket import TicketListOut, TicketOut, TicketStatusUpdate
from eventtix.services.audit_service import log_audit
from eventtix.services.event_config_service import EventSettings, update_event_config
from eventtix.services.inventory_service import availability
from eventtix.services.storage_service import save_upload, signed_url
from eventtix.services.verification_service import delete_ticket, get_ticket, set_status

router = APIRouter(tags=["admin"])


def _raise_http(e: DomainError):
    raise HTTPException(status_code=e.http_status, detail=e.message)


def _ticket_out(t: Ticket) -> TicketOut:
    return TicketOut(
        ticketCode=t.ticket_code,
        buyerName=t.buyer_name,
        buyerEmail=t.buyer_email,
        buyerPhone=t.buyer_phone or "",
        category=t.category,
        quantity=t.quantity,
        totalPrice=float(t.total_price),
        status=t.status,
        bankTransferSlipId=t.bank_transfer_slip_id,
        createdAt=t.created_at,
        updatedAt=t.updated_at,
    )


def _config_out(db: Session, event: EventSettings) -> EventConfigOut:
    left = availability(db, event)
    return EventConfigOut(
        content=event.content,
        ticketLabel=event.ticket_label,
        currency=event.currency,
        bankAccountName=event.bank_account_name,
        bankAccountNumber=event.bank_account_number,
        featuredImageId=event.featured_image_id,
        ticketCategories=[
            CategoryOut(name=c.name, price=float(c.price), limit=c.limit, remaining=left.get(c.name, 0))
            for c in event.categories.values()
        ],
    )


def _media_response(media: MediaFile):
    if media.storage_backend == "local":
        return FileResponse(path=media.object_key, media_type=media.mime_type, filename=media.filename or None)
    return RedirectResponse(url=signed_url(media))


@router.get("/admin/tickets", response_model=TicketListOut)
def list_tickets(status: str | None = None, category: str | None = None, q: str | None = None,
                 limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0),
                 db: Session = Depends(get_db), me: User = Depends(require_admin)):
    query = db.query(Ticket)
    if status:
        if status not in TICKET_STATUSES:
            raise HTTPException(status_code=400, detail="invalid status")
        query = query.filter(Ticket.status == status)
    if category:
        query = query.filter(Ticket.category == category)
    if q:
        ql = f"%{q.lower()}%"
        query = query.filter(
            func.lower(Ticket.buyer_email).like(ql)
            | func.lower(Ticket.buyer_name).like(ql)
            | func.lower(Ticket.ticket_code).like(ql)
        )
    total = query.count()
    items = query.order_by(Ticket.created_at.desc()).limit(limit).offset(offset).all()
    return TicketListOut(total=total, items=[_ticket_out(t) for t in items])


@router.get("/admin/tickets/{code}", response_model=TicketOut)
def admin_get_ticket(code: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    try:
        return _ticket_out(get_ticket(db, code))
    except DomainError as e:
        _raise_http(e)


@router.patch("/admin/tickets/{code}", response_model=TicketOut)
def update_ticket_status(code: str, body: TicketStatusUpdate,
                         db: Session = Depends(get_db), me: User = Depends(require_admin)):
    try:
        ticket = set_status(db, code, body.status, actor_email=me.email, note=body.note)
    except DomainError as e:
        _raise_http(e)
    return _ticket_out(ticket)


@router.delete("/admin/tickets/{code}")
def admin_delete_ticket(code: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    try:
        delete_ticket(db, code, actor_email=me.email)
    except DomainError as e:
        _raise_http(e)
    return {"ok": True}


@router.get("/admin/tickets/{code}/receipt")
def download_receipt(code: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    try:
        ticket = get_ticket(db, code)
    except DomainError as e:
        _raise_http(e)
    media = db.get(MediaFile, ticket.bank_transfer_slip_id)
    if not media:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return _media_response(media)


@router.get("/admin/event-config", response_model=EventConfigOut)
def get_event_config(db: Session = Depends(get_db), event: EventSettings = Depends(get_event_settings),
                     me: User = Depends(require_admin)):
    return _config_out(db, event)


@router.put("/admin/event-config", response_model=EventConfigOut)
def put_event_config(body: EventConfigIn, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    data = body.model_dump(exclude_unset=True)
    if data.get("featuredImageId"):
        media = db.get(MediaFile, data["featuredImageId"])
        if not media or not media.is_public:
            raise HTTPException(status_code=400, detail="featuredImageId must reference an uploaded public image")
    try:
        log_audit(db, me.email, "event_config.updated", "event_config", "1", data)
        event = update_event_config(db, data)
    except DomainError as e:
        db.rollback()
        _raise_http(e)
    return _config_out(db, event)


@router.get("/admin/availability", response_model=AvailabilityOut)
def get_availability(db: Session = Depends(get_db), event: EventSettings = Depends(get_event_settings),
                     me: User = Depends(require_admin)):
    return AvailabilityOut(remaining=availability(db, event))


@router.post("/admin/media", response_model=MediaOut)
def upload_media(file: UploadFile = File(...), alt: str = "",
                 db: Session = Depends(get_db), me: User = Depends(require_admin)):
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only images can be uploaded")
    try:
        media = save_upload(db, folder="public", filename=file.filename or "", content=content,
                            mime_type=file.content_type, alt=alt, is_public=True)
    except DomainError as e:
        _raise_http(e)
    log_audit(db, me.email, "media.uploaded", "media", media.id, {"filename": media.filename})
    db.commit()
    return MediaOut(id=media.id, filename=media.filename, mimeType=media.mime_type, size=media.size,
                    url=f"/media/{media.id}")
