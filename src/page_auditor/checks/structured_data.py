"""Structured data checker: JSON-LD blocks and rich-result previews."""

from typing import Any, Optional

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue, passed


def schema_type(data: Any) -> str:
    value = data.get("@type") if isinstance(data, dict) else None
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return "Unknown"


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def schema_preview(data: Any) -> dict:
    """
    Pull the fields a search result snippet would show out of one JSON-LD object.

    Args:
        data: Parsed JSON-LD payload

    Returns:
        Dictionary with type and raw, plus name, description, image, rating,
        price, author and datePublished where the payload carries them
    """
    preview: dict = {"type": schema_type(data), "raw": data}
    if not isinstance(data, dict):
        return preview

    if isinstance(data.get("name"), str):
        preview["name"] = data["name"]
    if isinstance(data.get("headline"), str):
        preview["name"] = data["headline"]
    if isinstance(data.get("description"), str):
        preview["description"] = data["description"]

    image = data.get("image")
    if isinstance(image, str):
        preview["image"] = image
    elif isinstance(image, list) and image and isinstance(image[0], str):
        preview["image"] = image[0]
    elif isinstance(image, dict) and isinstance(image.get("url"), str):
        preview["image"] = image["url"]

    rating = data.get("aggregateRating")
    if isinstance(rating, dict) and "ratingValue" in rating and "reviewCount" in rating:
        value = _to_float(rating["ratingValue"])
        count = _to_int(rating["reviewCount"])
        if value is not None and count is not None:
            preview["rating"] = {"value": value, "count": count}

    offers = data.get("offers")
    if isinstance(offers, dict) and "price" in offers:
        preview["price"] = {
            "value": str(offers["price"]),
            "currency": str(offers.get("priceCurrency") or "USD"),
        }

    author = data.get("author")
    if isinstance(author, str):
        preview["author"] = author
    elif isinstance(author, dict) and isinstance(author.get("name"), str):
        preview["author"] = author["name"]

    if isinstance(data.get("datePublished"), str):
        preview["datePublished"] = data["datePublished"]

    return preview


def check_structured_data(facts: DocumentFacts) -> CheckResult:
    schemas = [
        {"type": schema_type(data), "raw": data}
        for data in facts.json_ld
        if isinstance(data, (dict, list))
    ]
    has_schema = bool(schemas)

    if has_schema:
        issues = ()
        checks = (passed("structured-data", f"Found {len(schemas)} JSON-LD block(s)"),)
    else:
        issues = (issue(IssueSeverity.INFO, "structured-data", "No JSON-LD structured data found"),)
        checks = ()

    return CheckResult(
        status=SeoStatus.GOOD if has_schema else SeoStatus.INFO,
        issues=issues,
        passed=checks,
        details={
            "jsonLd": schemas,
            "microdata": [],
            "hasSchema": has_schema,
            "previews": [schema_preview(s["raw"]) for s in schemas],
        },
    )
