from typing import Optional

from ..core.errors import NotFoundError, ValidationError
from ..services.contacts import get_contact_book


async def add_contact(name: Optional[str], address: Optional[str]) -> str:
    if not name or not address:
        raise ValidationError("Name and address are required")
    saved = get_contact_book().add(name, address)
    return f"📇 Added {name} → {saved}"


async def remove_contact(name: Optional[str]) -> str:
    get_contact_book().remove(name)
    return f"🗑️ Removed {name} from your contacts."


async def get_contact(name: Optional[str]) -> str:
    address = get_contact_book().get(name)
    if not address:
        raise NotFoundError(f"Contact {name} not found")
    return f"📇 {name}: {address}"


async def get_contacts() -> str:
    contacts = get_contact_book().load()
    if not contacts:
        return "📭 Your contact book is empty."
    lines = ["📇 Your contacts:", ""]
    lines.extend(f"* **{name}**: {address}" for name, address in sorted(contacts.items()))
    return "\n".join(lines)
