"""
Defines the core data types for the picol runtime.

This module provides the status codes threaded through every evaluation,
the error taxonomy reported through the result text, call frames, and the
two kinds of command definition held by the command registry.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

# =================================================================
# Status Codes
# =================================================================

class Status(Enum):
    """The outcome of a command or of a whole evaluate call.

    Break, Continue and Return are control signals, not failures: they are
    returned by value and only `while` and procedure calls consume them.
    """
    OK = "Ok"
    ERR = "Err"
    RETURN = "Return"
    BREAK = "Break"
    CONTINUE = "Continue"

    def __str__(self) -> str:
        return self.value


# =================================================================
# Errors
# =================================================================

class PicolError(Exception):
    """Base class for errors a command reports as result text + Err."""
    pass


class UnknownVariable(PicolError):
    def __init__(self, name: str):
        super().__init__(f"Unknown variable {name}")
        self.name = name


class UnknownCommand(PicolError):
    def __init__(self, name: str):
        super().__init__(f"Unknown command {name}")
        self.name = name


class WrongArity(PicolError):
    def __init__(self, command: str):
        super().__init__(f"Wrong number of arguments for {command}")
        self.command = command


class DivisionByZero(PicolError):
    def __init__(self):
        super().__init__("Division by zero")


class DuplicateCommand(PicolError):
    def __init__(self, name: str):
        super().__init__(f"Command {name} already exists")
        self.name = name


class NotAnInteger(PicolError):
    def __init__(self, text: str):
        super().__init__(f'Expected integer but got "{text}"')
        self.text = text


class IntegerOverflow(PicolError):
    def __init__(self, command: str):
        super().__init__(f"Integer overflow in {command}")
        self.command = command


class RecursionLimitExceeded(PicolError):
    def __init__(self, limit: int):
        super().__init__(f"Recursion limit exceeded ({limit})")
        self.limit = limit


# =================================================================
# Call Frames
# =================================================================

class CallFrame:
    """One procedure invocation's variables.

    Lookups never fall through to `parent`; the link only records which
    frame becomes current again when this one is popped.
    """
    def __init__(self, parent: Optional['CallFrame'] = None):
        self.vars: Dict[str, str] = {}
        self.parent = parent

    def __getitem__(self, name: str) -> str:
        return self.vars[name]

    def __setitem__(self, name: str, value: str):
        self.vars[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.vars

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.vars.get(name, default)

    def depth(self) -> int:
        n = 0
        cur = self.parent
        while cur is not None:
            n += 1
            cur = cur.parent
        return n

    def __repr__(self) -> str:
        keys = ', '.join(self.vars.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<CallFrame vars=[{keys}]{parent_id}>"


# =================================================================
# Command Definitions
# =================================================================

# func(interpreter, argv, private_data) -> Status
CommandFunc = Callable[[Any, List[str], Any], Status]


class Command:
    """Abstract base for entries in the command registry."""
    def __init__(self, name: str):
        self.name = name


class NativeCommand(Command):
    """A command implemented in Python."""
    def __init__(self, name: str, func: CommandFunc, private_data: Any = None):
        super().__init__(name)
        self.func = func
        self.private_data = private_data

    def __repr__(self) -> str:
        fname = getattr(self.func, '__name__', '<callable>')
        return f"<NativeCommand {self.name} func={fname}>"


class Procedure(Command):
    """A user-defined command created by `proc`.

    `body` is kept as unparsed script text and re-lexed on every call.
    """
    def __init__(self, name: str, params: List[str], body: str):
        super().__init__(name)
        self.params = list(params)
        self.body = body

    def __repr__(self) -> str:
        return f"proc {self.name} {{{' '.join(self.params)}}} {{{self.body}}}"
