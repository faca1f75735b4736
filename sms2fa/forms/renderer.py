from dataclasses import dataclass, field
from typing import Any, Dict, List

# Field definitions per template; the client draws the actual form
FORM_FIELDS: Dict[str, List[Dict[str, Any]]] = {
    "mobile_number_form.ftl": [
        {"name": "mobile_number", "type": "tel", "required": True, "autocomplete": "tel"},
    ],
}


@dataclass(frozen=True)
class Challenge:
    template: str
    fields: List[Dict[str, Any]] = field(default_factory=list)
    action: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"template": self.template, "fields": list(self.fields), "action": self.action}


class FormRenderer:
    """Turns a template reference into a form descriptor. Never inspects user data."""

    def __init__(self, forms: Dict[str, List[Dict[str, Any]]] = None):
        self.forms = forms if forms is not None else FORM_FIELDS

    def render(self, template: str, action: str = "") -> Challenge:
        return Challenge(template=template, fields=[dict(f) for f in self.forms.get(template, [])], action=action)


form_renderer = FormRenderer()
