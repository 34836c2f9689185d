"""
Translation keys for field values.

A field's translation key decides which elements share a value: elements
whose keys match share a single stored value.
"""

import re
from typing import Any, Optional

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from contentkit.models.schemas import TranslationMethod

_env = SandboxedEnvironment(
    autoescape=False,
    finalize=lambda value: "" if value is None else value,
)

# {foo.bar} shorthand, but not {{ ... }} or {% ... %}
_SHORTHAND = re.compile(r"(?<![{%])\{(?![{%])\s*([A-Za-z_]\w*(?:\.\w+)*)\s*\}(?!\})")

_DESCRIPTIONS = {
    TranslationMethod.SITE: "This field is translated for each site.",
    TranslationMethod.SITE_GROUP: "This field is translated for each site group.",
    TranslationMethod.LANGUAGE: "This field is translated for each language.",
    TranslationMethod.CUSTOM: "This field is translated according to a custom translation key format.",
}


class TranslationKeyFormatError(ValueError):
    """Raised when a custom translation key format cannot be rendered."""


def render_object_template(template: str, obj: Any) -> str:
    """Render ``template`` with ``obj`` bound to ``object``.

    ``{attr}`` is shorthand for ``{{ object.attr }}``.
    """
    source = _SHORTHAND.sub(r"{{ object.\1 }}", template)
    try:
        return _env.from_string(source).render(object=obj)
    except jinja2.TemplateError as e:
        raise TranslationKeyFormatError(f"Invalid translation key format {template!r}: {e}") from e


def translation_key(element: Any, method: str, key_format: Optional[str] = None) -> str:
    method = TranslationMethod(method)
    site = element.site

    if method == TranslationMethod.NONE:
        return "1"
    if method == TranslationMethod.SITE:
        return str(site.id) if site.id is not None else site.handle
    if method == TranslationMethod.SITE_GROUP:
        return "" if site.group_id is None else str(site.group_id)
    if method == TranslationMethod.LANGUAGE:
        return site.language

    return render_object_template(key_format or "", element).strip()


def translation_description(method: str) -> Optional[str]:
    return _DESCRIPTIONS.get(TranslationMethod(method))
