from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from eventtix.api.deps import get_event_settings
from eventtix.core.config import settings
from eventtix.db.session import get_db
from eventtix.models.media import MediaFile
from eventtix.services.event_config_service import EventSettings
from eventtix.services.inventory_service import availability
from eventtix.services.storage_service import signed_url
from eventtix.services.ticket_service import render_ticket_pdf_bytes, ticket_view
from eventtix.services.verification_service import find_ticket

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent.parent / "templates"))

router = APIRouter(tags=["pages"])


def not_found_page(request: Request, message: str = "Ticket not found") -> HTMLResponse:
    return templates.TemplateResponse(
        request, "not_found.html", {"message": message, "app_name": settings.APP_NAME}, status_code=404
    )


@router.get("/", response_class=HTMLResponse)
def home(request: Request, db: Session = Depends(get_db), event: EventSettings = Depends(get_event_settings)):
    left = availability(db, event)
    categories = [
        {"name": c.name, "price": c.price, "remaining": left.get(c.name, 0)}
        for c in event.categories.values()
    ]
    return templates.TemplateResponse(request, "home.html", {
        "app_name": settings.APP_NAME,
        "event": event,
        "paragraphs": [p.strip() for p in event.content.split("\n\n") if p.strip()],
        "featured_image_url": f"/media/{event.featured_image_id}" if event.featured_image_id else None,
        "categories": categories,
    })


@router.get("/ticket/{code}", response_class=HTMLResponse)
def ticket_page(code: str, request: Request, db: Session = Depends(get_db),
                event: EventSettings = Depends(get_event_settings)):
    ticket = find_ticket(db, code)
    if not ticket:
        return not_found_page(request)
    context = ticket_view(ticket, event.currency)
    context["app_name"] = settings.APP_NAME
    return templates.TemplateResponse(request, "ticket.html", context)


@router.get("/ticket/{code}/pdf")
def ticket_pdf(code: str, db: Session = Depends(get_db), event: EventSettings = Depends(get_event_settings)):
    ticket = find_ticket(db, code)
    if not ticket or ticket.status != "verified":
        raise HTTPException(status_code=404, detail="Ticket not available")
    pdf = render_ticket_pdf_bytes(ticket=ticket, currency=event.currency, event_title=settings.APP_NAME)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="ticket-{ticket.ticket_code}.pdf"'},
    )


@router.get("/media/{media_id}")
def public_media(media_id: str, db: Session = Depends(get_db)):
    media = db.get(MediaFile, media_id)
    if not media or not media.is_public:
        raise HTTPException(status_code=404, detail="Not found")
    if media.storage_backend == "local":
        return FileResponse(path=media.object_key, media_type=media.mime_type)
    return RedirectResponse(url=signed_url(media))
