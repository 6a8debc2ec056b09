import json
import logging
import os
import tempfile
from typing import Any

from cfdk.errors import ConfigLoadError, ConfigSaveError
from cfdk.state import ConfigDocument, ContextEntry

logger = logging.getLogger(__name__)

DEFAULT_PATH = os.path.join(".fdk", "context.json")

# json field -> expected python type; missing fields fall back to the zero value
_ENTRY_FIELDS = {
    "name": str,
    "application_id": str,
    "domain": str,
    "company_id": int,
    "theme_id": str,
    "env": str,
}


def _expect(value: Any, typ, where: str):
    # bool is an int subclass, but `true` is not a company id
    if not isinstance(value, typ) or (typ is int and isinstance(value, bool)):
        raise ConfigLoadError(f"{where}: expected {typ.__name__}, got {type(value).__name__}")
    return value


def _parse_entry(key: str, raw: Any) -> ContextEntry:
    where = f"theme.contexts.{key}"
    _expect(raw, dict, where)
    known, extra = {}, {}
    for k, v in raw.items():
        if k in _ENTRY_FIELDS:
            if v is None:
                continue  # null decodes to the zero value, like a missing field
            known[k] = _expect(v, _ENTRY_FIELDS[k], f"{where}.{k}")
        else:
            extra[k] = v
    return ContextEntry(**known, extra=extra)


def parse_document(raw: Any) -> ConfigDocument:
    _expect(raw, dict, "document")
    if "theme" not in raw:
        raise ConfigLoadError("document: missing 'theme'")
    theme = _expect(raw["theme"], dict, "theme")
    if "contexts" not in theme:
        raise ConfigLoadError("theme: missing 'contexts'")
    contexts = theme["contexts"]
    contexts = {} if contexts is None else _expect(contexts, dict, "theme.contexts")
    active = theme.get("active_context")
    active = "" if active is None else _expect(active, str, "theme.active_context")

    return ConfigDocument(
        contexts={k: _parse_entry(k, v) for k, v in contexts.items()},
        active_context=active,
        theme_extra={k: v for k, v in theme.items() if k not in ("active_context", "contexts")},
        extra={k: v for k, v in raw.items() if k != "theme"},
    )


def load(path: str = DEFAULT_PATH) -> ConfigDocument:
    """Read and validate the context file. Any problem is a ConfigLoadError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigLoadError(f"cannot read {path}: {e.strerror or e}") from e
    except ValueError as e:  # JSONDecodeError and bad utf-8 both land here
        raise ConfigLoadError(f"{path} is not valid JSON: {e}") from e

    try:
        doc = parse_document(raw)
    except ConfigLoadError as e:
        raise ConfigLoadError(f"{path}: {e}") from None

    logger.debug("loaded %d contexts from %s (active=%r)", len(doc.contexts), path, doc.active_context)
    if doc.active_context and doc.active_entry is None:
        logger.info("active context %r is not in %s, treating as unset", doc.active_context, path)
    return doc


def save(path: str, doc: ConfigDocument):
    '''
    Write `doc` to `path` without ever leaving a half-written file:
    the JSON goes to a temp file next to the target, which then replaces it.
    '''
    try:
        text = json.dumps(doc.to_json(), indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as e:
        raise ConfigSaveError(f"cannot serialize config: {e}") from e

    directory = os.path.dirname(os.path.abspath(path))
    tmp = None
    try:
        try:
            mode = os.stat(path).st_mode & 0o777
        except FileNotFoundError:
            mode = 0o644
        fd, tmp = tempfile.mkstemp(prefix=".context.", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
        tmp = None
    except OSError as e:
        raise ConfigSaveError(f"cannot write {path}: {e.strerror or e}") from e
    finally:
        if tmp is not None and os.path.exists(tmp):
            os.unlink(tmp)

    logger.debug("saved %s (active=%r)", path, doc.active_context)
