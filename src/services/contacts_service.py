"""
Contacts service - business logic for contact management
"""

import logging
import uuid
from typing import Dict, Any, Optional
from uuid import UUID

from services.base_service import (
    BaseService,
    ServiceResult,
    INVALID_QUERY,
    RESOURCE_NOT_FOUND,
)
from utils.helpers import utc_now

logger = logging.getLogger(__name__)

CONTACT_COLUMNS = "id, first_name, last_name, phone, created_at, updated_at"
UPDATABLE_FIELDS = ("first_name", "last_name", "phone")

# Stable insertion order for list and search results
CONTACT_ORDER = "ORDER BY created_at, id"

class ContactsService(BaseService):
    """Service for contact management operations"""

    def __init__(self):
        super().__init__("contacts")

    async def create_contact(self, first_name: str, last_name: str, phone: str) -> ServiceResult:
        """
        Create a new contact

        Both timestamps are set from the same instant so a fresh record
        always has created_at == updated_at.

        Args:
            first_name: Contact's first name
            last_name: Contact's last name
            phone: Contact's phone number

        Returns:
            ServiceResult with the created contact
        """
        missing = [
            name for name, value in (("first_name", first_name), ("last_name", last_name), ("phone", phone))
            if not value
        ]
        if missing:
            return ServiceResult.fail(f"Missing required fields: {', '.join(missing)}", INVALID_QUERY)

        contact_id = uuid.uuid4()
        now = utc_now()

        logger.info(f"Creating contact {contact_id}")
        return await self._fetch(
            "Create",
            f"""
            INSERT INTO contacts (id, first_name, last_name, phone, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $5)
            RETURNING {CONTACT_COLUMNS}
            """,
            contact_id, first_name, last_name, phone, now
        )

    async def list_contacts(self) -> ServiceResult:
        """Get every contact in insertion order"""
        return await self._fetch(
            "List",
            f"SELECT {CONTACT_COLUMNS} FROM contacts {CONTACT_ORDER}"
        )

    async def get_contact_by_id(self, contact_id: UUID) -> ServiceResult:
        """
        Get a contact by its ID

        Returns:
            ServiceResult with one contact, or RESOURCE_NOT_FOUND
        """
        result = await self._fetch(
            "Get",
            f"SELECT {CONTACT_COLUMNS} FROM contacts WHERE id = $1",
            contact_id
        )
        if result.success and not result.data:
            return ServiceResult.fail(f"Contact not found: {contact_id}", RESOURCE_NOT_FOUND)
        return result

    async def update_contact(self, contact_id: UUID, updates: Dict[str, Any]) -> ServiceResult:
        """
        Apply a partial update to a contact in a single statement

        Fields missing from ``updates`` keep their stored values. updated_at
        always moves forward, even if the clock has not advanced since the
        previous write.

        Args:
            contact_id: UUID of the contact
            updates: Mapping of field name to new value

        Returns:
            ServiceResult with the updated contact, RESOURCE_NOT_FOUND if no
            row matched, or INVALID_QUERY for an empty or unknown update
        """
        unknown = sorted(set(updates) - set(UPDATABLE_FIELDS))
        if unknown:
            return ServiceResult.fail(f"Fields cannot be updated: {', '.join(unknown)}", INVALID_QUERY)

        changes = {field: value for field, value in updates.items() if value is not None}
        if not changes:
            return ServiceResult.fail("No fields provided for update", INVALID_QUERY)

        empty = [field for field, value in changes.items() if value == ""]
        if empty:
            return ServiceResult.fail(f"Fields must not be empty: {', '.join(empty)}", INVALID_QUERY)

        logger.info(f"Updating contact {contact_id}: {sorted(changes)}")
        result = await self._fetch(
            "Update",
            f"""
            UPDATE contacts
            SET
                first_name = COALESCE($2, first_name),
                last_name = COALESCE($3, last_name),
                phone = COALESCE($4, phone),
                updated_at = GREATEST($5, updated_at + INTERVAL '1 microsecond')
            WHERE id = $1
            RETURNING {CONTACT_COLUMNS}
            """,
            contact_id,
            changes.get("first_name"),
            changes.get("last_name"),
            changes.get("phone"),
            utc_now()
        )

        if result.success and not result.data:
            logger.warning(f"Contact {contact_id} not found for update")
            return ServiceResult.fail(f"Contact not found: {contact_id}", RESOURCE_NOT_FOUND)
        return result

    async def search_by_phone(self, phone: str) -> ServiceResult:
        """
        Find contacts whose phone number exactly matches ``phone``

        An unknown number yields an empty, successful result.
        """
        if not phone:
            return ServiceResult.fail("Query parameter 'phone' is required", INVALID_QUERY)

        return await self._fetch(
            "Search",
            f"SELECT {CONTACT_COLUMNS} FROM contacts WHERE phone = $1 {CONTACT_ORDER}",
            phone
        )

# Global service instance
_contacts_service: Optional[ContactsService] = None

def get_contacts_service() -> ContactsService:
    """Get the global contacts service instance"""
    global _contacts_service
    if _contacts_service is None:
        _contacts_service = ContactsService()
    return _contacts_service
