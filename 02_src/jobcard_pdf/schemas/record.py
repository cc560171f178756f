"""Record data schemas - job card values used to fill placeholders."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordData:
    """Job card values supplied by the record provider.

    Attributes:
        title: Job card title, exposed as {{title}}
        description: Job card description, exposed as {{description}}
        fields: Custom field values keyed by field name
    """
    title: str = ""
    description: str = ""
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_job_card(cls, job_card: Mapping[str, Any]) -> "RecordData":
        """Build record data from a stored job card.

        Args:
            job_card: Mapping with "title", "description" and "customData".
                customData may be a mapping or its JSON string form.

        Returns:
            RecordData instance
        """
        custom = job_card.get("customData") or job_card.get("fields") or {}
        if isinstance(custom, str):
            try:
                custom = json.loads(custom)
            except json.JSONDecodeError:
                logger.warning("customData is not valid JSON, ignoring custom fields")
                custom = {}
        if not isinstance(custom, Mapping):
            logger.warning(f"customData must be an object, got {type(custom).__name__}")
            custom = {}

        return cls(
            title=_stringify(job_card.get("title")),
            description=_stringify(job_card.get("description")),
            fields=dict(custom),
        )

    def placeholder_values(self) -> Dict[str, str]:
        """Values for placeholder substitution.

        The implicit title and description win over custom fields
        of the same name.
        """
        values = {str(name): _stringify(value) for name, value in self.fields.items()}
        values["title"] = self.title or ""
        values["description"] = self.description or ""
        return values

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "title": self.title,
            "description": self.description,
            "customData": dict(self.fields),
        }


def _stringify(value: Optional[Any]) -> str:
    if value is None:
        return ""
    return str(value)
