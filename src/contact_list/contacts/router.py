"""
API router for contact management.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from contact_list.config import Settings
from contact_list.contacts.csv_export import csv_attachment_response
from contact_list.contacts.schemas import ContactPayload, ContactResponse, MessageResponse
from contact_list.contacts.service import ContactService
from contact_list.shared.database import get_db_session

router = APIRouter(prefix="/contacts", tags=["contacts"])


def get_contact_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ContactService:
    """Dependency for contact service."""
    return ContactService(session=session)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
    description="Create a contact with its phone numbers. "
    "Fails with 400 when any number is already in use.",
)
async def create_contact(
    payload: ContactPayload,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> MessageResponse:
    await service.create(payload.name, payload.image, payload.phone_numbers)
    return MessageResponse(message="Contact created successfully")


@router.get(
    "",
    response_model=list[ContactResponse],
    summary="List contacts",
)
async def list_contacts(
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> list[ContactResponse]:
    contacts = await service.list_contacts()
    return [ContactResponse.from_record(c) for c in contacts]


@router.get(
    "/search",
    response_model=list[ContactResponse],
    summary="Search contacts",
    description="Case-insensitive substring match on name or any phone number.",
)
async def search_contacts(
    service: Annotated[ContactService, Depends(get_contact_service)],
    query: Annotated[str, Query(description="Substring to look for")] = "",
) -> list[ContactResponse]:
    contacts = await service.list_contacts(search=query)
    return [ContactResponse.from_record(c) for c in contacts]


@router.get(
    "/export",
    response_class=StreamingResponse,
    summary="Export contacts as CSV",
)
async def export_contacts(
    service: Annotated[ContactService, Depends(get_contact_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> StreamingResponse:
    chunks = await service.export_csv()
    return csv_attachment_response(chunks, settings.export_filename)


@router.put(
    "/{contact_id}",
    response_model=MessageResponse,
    summary="Replace contact",
    description="Overwrite name and image and replace all phone numbers.",
)
async def update_contact(
    contact_id: int,
    payload: ContactPayload,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> MessageResponse:
    await service.update(contact_id, payload.name, payload.image, payload.phone_numbers)
    return MessageResponse(message="Contact updated successfully")


@router.delete(
    "/{contact_id}",
    response_model=MessageResponse,
    summary="Delete contact",
    description="Delete a contact and its phone numbers. Unknown ids succeed.",
)
async def delete_contact(
    contact_id: int,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> MessageResponse:
    await service.remove(contact_id)
    return MessageResponse(message="Contact deleted successfully")
