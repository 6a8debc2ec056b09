import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional

from cfdk import store
from cfdk.domains import extract_domains, resolve_context
from cfdk.errors import CommandError
from cfdk.screen import Surface
from cfdk.selector import Cancelled, select

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
    selected: Optional[str] = None
    active_env: Optional[str] = None
    cancelled: bool = False

    def __post_init__(self):
        if not self.cancelled and self.selected is None:
            raise ValueError("a SessionResult is either cancelled or has a selected domain")

    @classmethod
    def confirmed(cls, domain: str, env: str) -> 'SessionResult':
        return cls(selected=domain, active_env=env)

    @classmethod
    def cancel(cls) -> 'SessionResult':
        return cls(cancelled=True)


def run_session(path: str, open_surface: Callable[[], Surface]) -> SessionResult:
    '''
    Load the context file, let the user pick a domain, and persist the pick.

    `open_surface` is only called once the file has loaded, so a broken config
    never touches the terminal. On cancel the file is left exactly as it was.
    On confirm the first context (in file order) with the chosen domain becomes
    active and the file is saved before the result is returned; a failed save
    raises ConfigSaveError and there is no result.
    '''
    doc = store.load(path)
    options = extract_domains(doc.contexts)
    logger.debug("%d domains: %r", len(options), options)

    with open_surface() as surface:
        outcome = select(options, surface)

    if isinstance(outcome, Cancelled):
        logger.info("selection ended (%s), %s left unchanged", outcome.reason, path)
        return SessionResult.cancel()

    key = resolve_context(doc.contexts, outcome.option)
    doc.activate(key)
    store.save(path, doc)
    logger.info("active context is now %r (domain %r)", key, outcome.option)
    return SessionResult.confirmed(outcome.option, doc.contexts[key].env)


class FdkCommands:
    """Runs the `fdk` CLI with the user's terminal attached."""

    def __init__(self, executable: str = "fdk", runner: Callable = subprocess.run):
        self.executable = executable
        self.runner = runner

    def _run(self, args: List[str]):
        cmd = [self.executable] + args
        logger.debug("running %s", " ".join(cmd))
        try:
            self.runner(cmd, check=True)
        except FileNotFoundError as e:
            raise CommandError(f"{self.executable!r} not found on PATH") from e
        except subprocess.CalledProcessError as e:
            raise CommandError(f"`{' '.join(cmd)}` exited with status {e.returncode}") from e
        except OSError as e:
            raise CommandError(f"cannot run `{' '.join(cmd)}`: {e}") from e

    def set_environment(self, name: str):
        print(name)
        self._run(["env", "set", "-n", name])

    def login(self):
        self._run(["login"])


def fdk_executable() -> str:
    return os.environ.get("CFDK_FDK_BIN") or "fdk"


def hand_off(result: SessionResult, commands: FdkCommands):
    """Activate the chosen env then log in. A cancelled session runs nothing."""
    if result.cancelled:
        return
    commands.set_environment(result.active_env)
    commands.login()
