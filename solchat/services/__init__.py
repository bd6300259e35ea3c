"""Service layer helpers"""

from .contacts import ContactBook, get_contact_book
from .token_resolution import (
    PriceFeedResolver,
    SymbolResolver,
    TokenInfo,
    get_price_feed_resolver,
    get_symbol_resolver,
)

__all__ = [
    "ContactBook",
    "get_contact_book",
    "PriceFeedResolver",
    "SymbolResolver",
    "TokenInfo",
    "get_price_feed_resolver",
    "get_symbol_resolver",
]
