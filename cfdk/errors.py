class CfdkError(Exception):
    """Base class for every fatal cfdk error."""


class ConfigLoadError(CfdkError):
    pass

class ConfigSaveError(CfdkError):
    pass

class TerminalInitError(CfdkError):
    pass


class InputStreamError(CfdkError):
    '''
    Raised by a surface when reading the next key fails.
    The selection loop treats it as a cancel, so it never reaches the user.
    '''


class ResolutionInvariantError(CfdkError):
    """A chosen domain has no context behind it (options and contexts disagree)."""


class CommandError(CfdkError):
    """An external `fdk` command failed or could not be started."""
