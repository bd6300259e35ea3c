"""
Contact book persisted as a flat JSON object: lowercased name -> address.

Every mutation re-reads the file and rewrites it whole (last writer wins).
Writes land through a temp file and ``os.replace`` so readers never see a
partial file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from ..config import settings
from ..core.errors import NotFoundError, ValidationError
from .address import require_solana_address

logger = logging.getLogger(__name__)


def _key(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Contact name is required")
    return name.strip().lower()


class ContactBook:
    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else Path(settings.contacts_file)

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as handle:
            raw = handle.read()
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValidationError(f"Contact file {self.path} must hold a JSON object")
        return {str(k).lower(): str(v) for k, v in data.items()}

    def save(self, contacts: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".contacts-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(contacts, handle, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, name: str) -> Optional[str]:
        return self.load().get(_key(name))

    def add(self, name: str, address: str) -> str:
        key = _key(name)
        address = require_solana_address(address, "contact address")
        contacts = self.load()
        contacts[key] = address
        self.save(contacts)
        logger.info("Saved contact %s", key)
        return address

    def remove(self, name: str) -> None:
        key = _key(name)
        contacts = self.load()
        if key not in contacts:
            raise NotFoundError(f"Contact {name} not found")
        del contacts[key]
        self.save(contacts)
        logger.info("Removed contact %s", key)


_contact_book: Optional[ContactBook] = None


def get_contact_book() -> ContactBook:
    global _contact_book
    if _contact_book is None:
        _contact_book = ContactBook()
    return _contact_book
