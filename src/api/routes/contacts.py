"""
Contact management API routes
All database access goes through the contacts service layer.
"""

import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, HTTPException, Depends, Query, status

from models.contact import ContactCreateRequest, ContactUpdateRequest, ContactResponse
from services.base_service import ServiceResult, INVALID_QUERY, RESOURCE_NOT_FOUND
from services.contacts_service import ContactsService, get_contacts_service

router = APIRouter()
logger = logging.getLogger(__name__)

def _raise_for_result(result: ServiceResult):
    """Translate a failed ServiceResult into the matching HTTP error"""
    if result.success:
        return
    if result.error_type == RESOURCE_NOT_FOUND:
        raise HTTPException(status_code=404, detail="Contact not found")
    elif result.error_type == INVALID_QUERY:
        raise HTTPException(status_code=400, detail=result.error)
    else:
        raise HTTPException(status_code=500, detail=result.error)

@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    request: ContactCreateRequest,
    contacts_service: ContactsService = Depends(get_contacts_service)
):
    """Create a new contact"""
    result = await contacts_service.create_contact(
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone
    )
    _raise_for_result(result)

    contact = result.data[0]
    logger.info(f"Created contact {contact['id']}")
    return contact

@router.get("", response_model=List[ContactResponse])
async def list_contacts(
    contacts_service: ContactsService = Depends(get_contacts_service)
):
    """List all contacts in insertion order"""
    result = await contacts_service.list_contacts()
    _raise_for_result(result)
    return result.data

@router.get("/search", response_model=List[ContactResponse])
async def search_contacts_by_phone(
    phone: str = Query(..., min_length=1, description="Exact phone number to match"),
    contacts_service: ContactsService = Depends(get_contacts_service)
):
    """Find contacts by exact phone number; no match returns an empty list"""
    result = await contacts_service.search_by_phone(phone)
    _raise_for_result(result)

    logger.debug(f"Phone search matched {result.count} contact(s)")
    return result.data

@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: UUID,
    contacts_service: ContactsService = Depends(get_contacts_service)
):
    """Get contact details"""
    result = await contacts_service.get_contact_by_id(contact_id)
    _raise_for_result(result)
    return result.data[0]

@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: UUID,
    request: ContactUpdateRequest,
    contacts_service: ContactsService = Depends(get_contacts_service)
):
    """Update any subset of a contact's name and phone fields"""
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    result = await contacts_service.update_contact(contact_id, updates)
    _raise_for_result(result)

    contact = result.data[0]
    logger.info(f"Updated contact {contact_id}: {sorted(updates)}")
    return contact
