from app.core.config import settings
from app.schemas.card import CardContent
import requests
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


class EnrichmentService:
    """Looks up pronunciation and definition for a term in the Free Dictionary API."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.dictionary_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.enrichment_timeout_seconds

    @staticmethod
    def _parse_entries(entries: List[Dict[str, Any]]) -> Dict[str, str]:
        """
        Pick the first phonetic text and the first definition found.

        Args:
            entries: Decoded JSON body, a list of dictionary entries

        Returns:
            Dict with optional 'pronunciation' and 'definition' keys
        """
        result: Dict[str, str] = {}
        for entry in entries:
            if "pronunciation" not in result:
                phonetic = entry.get("phonetic") or next(
                    (p.get("text") for p in entry.get("phonetics", []) if p.get("text")),
                    None
                )
                if phonetic:
                    result["pronunciation"] = phonetic
            if "definition" not in result:
                for meaning in entry.get("meanings", []):
                    definitions = meaning.get("definitions") or []
                    if definitions and definitions[0].get("definition"):
                        result["definition"] = definitions[0]["definition"]
                        break
        return result

    def lookup(self, term: str) -> Dict[str, str]:
        """
        Fetch pronunciation / definition for ``term``.

        Never raises: any network or format problem yields an empty dict so
        card creation can go ahead without enrichment.
        """
        term = (term or "").strip()
        if not term:
            return {}

        url = f"{self.base_url}/{quote(term)}"
        try:
            response = requests.get(url, timeout=self.timeout)
            if response.status_code == 404:
                logger.info(f"No dictionary entry for '{term}'")
                return {}
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Dictionary lookup failed for '{term}': {str(e)}")
            return {}
        except ValueError as e:
            logger.warning(f"Dictionary returned invalid JSON for '{term}': {str(e)}")
            return {}

        if not isinstance(data, list):
            logger.warning(f"Unexpected dictionary response format for '{term}': {data}")
            return {}

        result = self._parse_entries([entry for entry in data if isinstance(entry, dict)])
        logger.info(f"Enriched '{term}' with fields: {sorted(result)}")
        return result

    def enrich_content(self, content: CardContent) -> CardContent:
        """Return a copy of ``content`` with empty pronunciation / definition filled in."""
        if content.pronunciation and content.definition:
            return content

        found = self.lookup(content.vocabulary)
        updates = {}
        if not content.pronunciation and found.get("pronunciation"):
            updates["pronunciation"] = found["pronunciation"]
        if not (content.definition or "").strip() and found.get("definition"):
            updates["definition"] = found["definition"]
        return content.model_copy(update=updates) if updates else content


# Global instance
enrichment_service = EnrichmentService()
