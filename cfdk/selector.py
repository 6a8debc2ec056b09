'''
The interactive domain picker.

`step` is the whole state machine and is a pure function; `select` drives it
against a `Surface`, redrawing the full list after every event until the user
confirms or cancels.
'''
from dataclasses import dataclass
from typing import List, Sequence, Union

from cfdk.errors import InputStreamError
from cfdk.screen import Event, Surface


@dataclass(frozen=True)
class Running:
    cursor: int = 0

@dataclass(frozen=True)
class Confirmed:
    option: str

@dataclass(frozen=True)
class Cancelled:
    reason: str = "cancelled"


SelectionState = Union[Running, Confirmed, Cancelled]

EMPTY_NOTICE = "(no domains to choose from, press esc to quit)"


def option_label(option: str) -> str:
    return option if option else "(empty domain)"


def step(state: SelectionState, event: Event, options: Sequence[str]) -> SelectionState:
    if not isinstance(state, Running):
        return state  # terminal states absorb everything

    i = state.cursor
    if event is Event.MOVE_UP:
        return Running(max(i - 1, 0))
    if event is Event.MOVE_DOWN:
        return Running(max(min(i + 1, len(options) - 1), 0))
    if event is Event.CONFIRM:
        # nothing to confirm in an empty list, only cancel gets you out
        return Confirmed(options[i]) if options else state
    if event is Event.CANCEL:
        return Cancelled("cancelled")
    if event is Event.ERROR:
        return Cancelled("input error")
    return state


def render(surface: Surface, options: Sequence[str], cursor: int):
    surface.clear()
    if not options:
        surface.draw_notice(EMPTY_NOTICE)
    for i, option in enumerate(options):
        surface.draw_option(i, option_label(option), i == cursor)
    surface.flush()


def select(options: List[str], surface: Surface) -> Union[Confirmed, Cancelled]:
    '''
    Run the picker until it reaches Confirmed or Cancelled.

    The surface is closed on the way out whatever happens, including errors
    raised by the surface itself, so the terminal is always given back.
    An input error from the surface ends the loop as a cancel; it is not retried.
    '''
    state: SelectionState = Running(0)
    try:
        while isinstance(state, Running):
            render(surface, options, state.cursor)
            try:
                event = surface.poll_event()
            except InputStreamError:
                event = Event.ERROR
            state = step(state, event, options)
    finally:
        surface.close()
    return state
