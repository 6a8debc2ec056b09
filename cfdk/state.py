from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ContextEntry:
    name: str = ""
    application_id: str = ""
    domain: str = ""
    company_id: int = 0
    theme_id: str = ""
    env: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)  # unknown keys, written back as-is

    def to_json(self) -> dict:
        out = dict(self.extra)
        out.update({
            "name": self.name,
            "application_id": self.application_id,
            "domain": self.domain,
            "company_id": self.company_id,
            "theme_id": self.theme_id,
            "env": self.env,
        })
        return out


@dataclass
class ConfigDocument:
    '''
    The whole `.fdk/context.json` file.

    `contexts` keeps the key order of the file; that order is the one
    traversal used both for listing domains and for picking the context
    behind a domain. Everything cfdk does not understand (`partners`,
    unknown keys in `theme` and at the root) is carried through untouched.
    '''
    contexts: Dict[str, ContextEntry] = field(default_factory=dict)
    active_context: str = ""
    theme_extra: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)  # root keys besides "theme", "partners" included

    @property
    def partners(self) -> Any:
        return self.extra.get("partners")

    @property
    def active_entry(self) -> Optional[ContextEntry]:
        # a stale key left by someone else reads as "nothing selected"
        return self.contexts.get(self.active_context)

    def activate(self, key: str):
        if key not in self.contexts:
            raise KeyError(key)
        self.active_context = key

    def to_json(self) -> dict:
        theme = dict(self.theme_extra)
        theme["active_context"] = self.active_context
        theme["contexts"] = {k: c.to_json() for k, c in self.contexts.items()}
        out = {"theme": theme}
        out.update(self.extra)
        return out
