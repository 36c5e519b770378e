# picol_runtime.py

import inspect
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from picol.picol_interpreter import Interpreter
from picol.picol_datatypes import (
    Status, WrongArity, DivisionByZero, NotAnInteger, IntegerOverflow
)

# ===================================================================
# 1. The Standard Library
# ===================================================================

_INT_RE = re.compile(r"[+-]?[0-9]+")

# Values are signed 64-bit machine integers.
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


def parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise NotAnInteger(text)
    try:
        value = int(text)
    except ValueError:
        # Past the interpreter's digit limit for int().
        raise NotAnInteger(text) from None
    if not INT_MIN <= value <= INT_MAX:
        raise NotAnInteger(text)
    return value


def _truncating_div(a: int, b: int) -> int:
    # Python's // floors; picol division truncates toward zero.
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


MATH_OPERATORS = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _truncating_div,
    ">": lambda a, b: int(a > b),
    "<": lambda a, b: int(a < b),
    ">=": lambda a, b: int(a >= b),
    "<=": lambda a, b: int(a <= b),
    "==": lambda a, b: int(a == b),
    "!=": lambda a, b: int(a != b),
}


class StdLib:
    """Contains Python implementations for all picol built-ins.

    Every `_name` method is registered as the command `name`; the math
    operators share `_math`, which is registered under each operator symbol.
    """
    def __init__(self, interpreter: Interpreter):
        self.interpreter = interpreter

    def register_all(self):
        interp = self.interpreter
        for op in MATH_OPERATORS:
            interp.register_command(op, self._math)
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                cmd_name = name[1:]
                if cmd_name in ("math", "retcodes"):
                    continue
                interp.register_command(cmd_name, member)
        interp.register_command("break", self._retcodes, Status.BREAK)
        interp.register_command("continue", self._retcodes, Status.CONTINUE)

    # --- Math and Logic ---
    def _math(self, interp: Interpreter, argv: List[str], pd) -> Status:
        if len(argv) != 3:
            raise WrongArity(argv[0])
        a = parse_int(argv[1])
        b = parse_int(argv[2])
        if argv[0] == "/" and b == 0:
            raise DivisionByZero()
        value = MATH_OPERATORS[argv[0]](a, b)
        if not INT_MIN <= value <= INT_MAX:
            raise IntegerOverflow(argv[0])
        interp.set_result(str(value))
        return Status.OK

    # --- Variables and I/O ---
    def _set(self, interp: Interpreter, argv: List[str], pd) -> Status:
        if len(argv) != 3:
            raise WrongArity(argv[0])
        interp.set_var(argv[1], argv[2])
        interp.set_result(argv[2])
        return Status.OK

    def _puts(self, interp: Interpreter, argv: List[str], pd) -> Status:
        """Sends a line to the host through the stdout side-effect topic."""
        if len(argv) != 2:
            raise WrongArity(argv[0])
        interp.emit("stdout", argv[1])
        return Status.OK

    # --- Language Primitives ---
    def _if(self, interp: Interpreter, argv: List[str], pd) -> Status:
        # if cond then ?else body?; the word 'else' itself is not checked
        if len(argv) != 3 and len(argv) != 5:
            raise WrongArity(argv[0])
        status = interp.eval(argv[1])
        if status is not Status.OK:
            return status
        if interp.result == "1":
            return interp.eval(argv[2])
        if len(argv) == 5:
            return interp.eval(argv[4])
        return Status.OK

    def _while(self, interp: Interpreter, argv: List[str], pd) -> Status:
        if len(argv) != 3:
            raise WrongArity(argv[0])
        cond, body = argv[1], argv[2]
        while True:
            status = interp.eval(cond)
            if status is not Status.OK:
                return status
            if interp.result != "1":
                return Status.OK
            status = interp.eval(body)
            match status:
                case Status.OK | Status.CONTINUE:
                    continue
                case Status.BREAK:
                    return Status.OK
                case _:
                    return status

    def _retcodes(self, interp: Interpreter, argv: List[str], pd: Status) -> Status:
        if len(argv) != 1:
            raise WrongArity(argv[0])
        return pd

    def _proc(self, interp: Interpreter, argv: List[str], pd) -> Status:
        if len(argv) != 4:
            raise WrongArity(argv[0])
        interp.register_procedure(argv[1], argv[2].split(), argv[3])
        return Status.OK

    def _return(self, interp: Interpreter, argv: List[str], pd) -> Status:
        if len(argv) != 1 and len(argv) != 2:
            raise WrongArity(argv[0])
        interp.set_result(argv[1] if len(argv) == 2 else "")
        return Status.RETURN


# ===================================================================
# 2. Script Execution
# ===================================================================

@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Status
    value: str = ""
    error_message: Optional[str] = None
    side_effects: List[Dict] = field(default_factory=list)

    def stdout(self) -> List[str]:
        return [e.get('message', '') for e in self.side_effects if e.get('topics') == ['stdout']]

    def format_line(self) -> str:
        """The driver's `STATUS RESULT` line; empty when there is no result."""
        if not self.value:
            return ""
        return f"{self.status} {self.value}"


class ScriptRunner:
    """Runs picol scripts against one long-lived interpreter."""

    def __init__(self, max_depth: Optional[int] = None, register_core: bool = True,
                 output: Optional[Callable[[str], Any]] = None):
        self.interpreter = Interpreter(max_depth=max_depth, output=output)
        if register_core:
            StdLib(self.interpreter).register_all()

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        interp = self.interpreter
        interp.side_effects.clear()
        interp._dbg("handle_script", "chars", len(source_code))
        try:
            status, result = interp.evaluate(source_code)
        except Exception as e:
            msg = f"InternalError: {e}"
            interp.set_result(msg)
            interp.emit("stderr", msg)
            return ExecutionResult(
                status=Status.ERR,
                value=msg,
                error_message=msg,
                side_effects=list(interp.side_effects)
            )

        return ExecutionResult(
            status=status,
            value=result,
            error_message=result if status is Status.ERR else None,
            side_effects=list(interp.side_effects)
        )
