"""Monitor name derivation from ingress metadata."""

import string
from typing import Any

from .errors import NameTemplateError

_TEMPLATE_FIELDS = ("namespace", "ingress_name")


class Namer:
    """Builds monitor names from a ``str.format`` style template.

    Available fields are ``{namespace}`` and ``{ingress_name}``. Only the
    ingress metadata is used, so names can be computed for ingresses that
    were already deleted or never passed validation.
    """

    def __init__(self, template: str):
        try:
            fields = [name for _, name, _, _ in string.Formatter().parse(template) if name is not None]
        except ValueError as e:
            raise NameTemplateError(f"invalid name template {template!r}: {e}") from e

        unknown = [name for name in fields if name not in _TEMPLATE_FIELDS]
        if unknown:
            raise NameTemplateError(
                f"invalid name template {template!r}: unknown fields {', '.join(unknown)}"
            )

        self.template = template

    def name(self, ingress: Any) -> str:
        metadata = ingress.metadata
        name = self.template.format(namespace=metadata.namespace or "", ingress_name=metadata.name or "")
        if not name:
            raise NameTemplateError(f"name template {self.template!r} produced an empty name")
        return name
