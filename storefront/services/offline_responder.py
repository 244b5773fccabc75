"""
Offline chat answers

Used when the chat backend is unreachable or its reply is empty once
directives are stripped. Matches product names from the catalogue, otherwise
answers with the contact details.
"""
import logging
from typing import Any, Dict, List, Optional

from .backend_client import BackendClient

logger = logging.getLogger(__name__)

CONTACT_REPLY = (
    "I'm sorry 🤔, I couldn’t find specific information for \"{query}\".\n"
    "But you can reach out to us directly:\n"
    "📍 Mandsaur, Madhya Pradesh, India\n"
    "📞 +91 98931 56792\n"
    "📧 info@sdherbs.com\n"
    "\n"
    "Or send your question via our Contact page — we’ll get back to you soon."
)

CONNECTION_ISSUE_REPLY = (
    "I'm facing connection issues 😕. Please try again later or reach out "
    "via our Contact page."
)


def find_product(user_text: str, products: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First product whose name occurs in the user text (case-insensitive)"""
    lowered = user_text.lower()
    for product in products:
        if not isinstance(product, dict):
            continue
        name = product.get("name")
        if isinstance(name, str) and name and name.lower() in lowered:
            return product
    return None


class OfflineResponder:
    """Templated replies built from the product catalogue"""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def respond(self, user_text: str) -> str:
        """Never raises; falls back to the connection-issues text"""
        try:
            products = await self.backend.list_products()
        except Exception as e:
            logger.warning(f"Offline responder could not load products: {e}")
            return CONNECTION_ISSUE_REPLY

        found = find_product(user_text, products)
        if found:
            return f"🌿 *{found['name']}* — {found.get('description') or ''}"

        return CONTACT_REPLY.format(query=user_text)
