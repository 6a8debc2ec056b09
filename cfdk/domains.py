from typing import Dict, List

from cfdk.errors import ResolutionInvariantError
from cfdk.state import ContextEntry


def extract_domains(contexts: Dict[str, ContextEntry]) -> List[str]:
    """Distinct domains, in the order they first appear in `contexts`."""
    seen = set()
    domains = []
    for ctx in contexts.values():
        if ctx.domain not in seen:
            seen.add(ctx.domain)
            domains.append(ctx.domain)
    return domains


def resolve_context(contexts: Dict[str, ContextEntry], domain: str) -> str:
    '''
    Key of the context that becomes active for `domain`.

    Several contexts may share a domain; the first one in file order wins,
    same traversal as `extract_domains`.
    '''
    for key, ctx in contexts.items():
        if ctx.domain == domain:
            return key
    raise ResolutionInvariantError(f"no context has domain {domain!r}")
