"""Field extraction and selector probing over parsed HTML."""

from bs4 import BeautifulSoup, Tag

from .logging_config import get_logger
from .models import FieldExtraction, FieldMapping, SelectorTestResult
from .transforms import apply_transforms

logger = get_logger(__name__)

MAX_SAMPLES = 5
MAX_SAMPLE_LENGTH = 200
NO_ELEMENTS_FOUND = "No elements found"
UNTITLED = "Untitled"


def parse_markup(markup: str | BeautifulSoup) -> BeautifulSoup:
    """Parse HTML into a queryable document (already parsed documents pass through)."""
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup, "html.parser")


def select_elements(markup: str | BeautifulSoup, selector: str) -> list[Tag]:
    """Return the elements matching a CSS selector, in document order."""
    return parse_markup(markup).select(selector)


def extract_title(markup: str | BeautifulSoup) -> str:
    """Get the page title, or "Untitled" when missing or blank."""
    soup = parse_markup(markup)
    title = "".join(el.get_text() for el in soup.select("title")).strip()
    return title or UNTITLED


def get_element_value(element: Tag, attribute: str | None) -> str:
    """Read the raw value of an element.

    "text" (or no attribute) gives the stripped text content, "html" the
    inner markup, anything else the named attribute ("" when missing).
    """
    if not attribute or attribute == "text":
        return element.get_text().strip()
    if attribute == "html":
        return element.decode_contents()

    value = element.get(attribute)
    if value is None:
        return ""
    # Multi-valued attributes such as class come back as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def extract_field(
    markup: str | BeautifulSoup,
    mapping: FieldMapping,
    base_url: str,
) -> FieldExtraction:
    """Extract one field mapping from a page.

    Never raises: a selector without matches or any failure while reading
    elements is reported in the ``error`` of the returned extraction.

    Args:
        markup: HTML string or parsed document.
        mapping: The field mapping to evaluate.
        base_url: URL of the page, used to resolve relative URLs.

    Returns:
        FieldExtraction with a scalar value, a list (for multiple mappings)
        or None plus an error.
    """
    try:
        elements = select_elements(markup, mapping.selector)

        if not elements:
            return FieldExtraction(
                field=mapping.field,
                selector=mapping.selector,
                value=None,
                error=NO_ELEMENTS_FOUND,
            )

        def transformed(element: Tag) -> str:
            value = get_element_value(element, mapping.attribute)
            if mapping.transforms:
                value = apply_transforms(value, mapping.transforms, base_url)
            return value

        if mapping.multiple:
            values = [v for v in (transformed(el) for el in elements) if v]
            return FieldExtraction(field=mapping.field, selector=mapping.selector, value=values)

        return FieldExtraction(
            field=mapping.field,
            selector=mapping.selector,
            value=transformed(elements[0]),
        )

    except Exception as e:
        logger.debug("field_extraction_failed", field=mapping.field, selector=mapping.selector, error=str(e))
        return FieldExtraction(
            field=mapping.field,
            selector=mapping.selector,
            value=None,
            error=str(e),
        )


def test_selector(markup: str | BeautifulSoup, selector: str) -> SelectorTestResult:
    """Report how many elements a selector matches, with text samples.

    Args:
        markup: HTML string or parsed document.
        selector: CSS selector to evaluate.

    Returns:
        SelectorTestResult; malformed selectors are reported in ``error``.
    """
    try:
        elements = select_elements(markup, selector)
    except Exception as e:
        return SelectorTestResult(
            found=False,
            count=0,
            samples=[],
            error=f"Invalid selector: {e}",
        )

    if not elements:
        return SelectorTestResult(found=False, count=0, samples=[])

    samples = []
    for element in elements[:MAX_SAMPLES]:
        text = element.get_text().strip()[:MAX_SAMPLE_LENGTH]
        if text:
            samples.append(text)

    return SelectorTestResult(found=True, count=len(elements), samples=samples)
