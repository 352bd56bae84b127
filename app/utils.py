from typing import Any

from app.core.exceptions import InvalidInput


def extract_titles(export: Any) -> list[str]:
    """
    Pull the titles list out of a raw viewing-history export.

    The export is a JSON array whose first object carries ``publicData.titles``.
    """
    if not isinstance(export, list) or not export:
        raise InvalidInput("Invalid input: Expected a non-empty array")

    data_object = export[0]
    public_data = data_object.get("publicData") if isinstance(data_object, dict) else None
    if not isinstance(public_data, dict) or not isinstance(public_data.get("titles"), list):
        raise InvalidInput("Invalid data structure: Expected publicData.titles array")

    return public_data["titles"]


def normalize_titles(titles: list[Any]) -> list[str]:
    """Strip titles and drop blanks. Repeated titles are kept, each one counts toward the profile."""
    return [title.strip() for title in titles if isinstance(title, str) and title.strip()]
