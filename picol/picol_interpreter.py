"""
The core picol interpreter: scope chain, command registry and the evaluator.
"""
import os
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

from picol.picol_datatypes import (
    Status, PicolError, UnknownVariable, UnknownCommand, WrongArity,
    DuplicateCommand, RecursionLimitExceeded,
    CallFrame, Command, NativeCommand, Procedure, CommandFunc
)
from picol.picol_lexer import Lexer, TokenType, unescape

DEFAULT_MAX_DEPTH = 500

# Python frames one eval level can hold: eval, _eval, call and the handler.
FRAMES_PER_LEVEL = 4


def _max_depth_from_env() -> int:
    raw = os.environ.get("PICOL_MAX_DEPTH")
    if raw is None:
        return DEFAULT_MAX_DEPTH
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MAX_DEPTH
    return value if value > 0 else DEFAULT_MAX_DEPTH


def _ensure_python_recursion_limit(max_depth: int):
    # Raised, never lowered.
    needed = max_depth * FRAMES_PER_LEVEL + 1000
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


class Interpreter:
    """The picol execution engine.

    `output`, when given, receives every `stdout` message as soon as it is
    emitted; those messages are then not kept in `side_effects`.
    """

    def __init__(self, max_depth: Optional[int] = None,
                 output: Optional[Callable[[str], Any]] = None):
        self.commands: Dict[str, Command] = {}
        self.frame = CallFrame()
        self.result: str = ""
        # Nesting of eval calls currently on the Python stack.
        self.level: int = 0
        self.max_depth = max_depth if max_depth is not None else _max_depth_from_env()
        _ensure_python_recursion_limit(self.max_depth)
        self.output = output
        self.side_effects: List[Dict[str, Any]] = []

    def _dbg(self, *parts):
        if os.environ.get("PICOL_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    # --- Result ---

    def set_result(self, text: str):
        self.result = text

    def fail(self, err: PicolError) -> Status:
        """Reports `err` through the result text."""
        self.set_result(str(err))
        return Status.ERR

    def emit(self, topic: str, message: str):
        if topic == "stdout" and self.output is not None:
            self.output(message)
            return
        self.side_effects.append({"topics": [topic], "message": message})

    # --- Scope Chain ---

    def get_var(self, name: str) -> Optional[str]:
        # Current frame only: callers' variables are invisible.
        return self.frame.get(name)

    def set_var(self, name: str, value: str):
        self.frame[name] = value

    def push_frame(self):
        self.frame = CallFrame(parent=self.frame)
        self._dbg("push frame", "depth", self.frame.depth())

    def pop_frame(self):
        if self.frame.parent is None:
            raise RuntimeError("cannot pop the root call frame")
        self._dbg("pop frame", "depth", self.frame.depth())
        frame = self.frame
        self.frame = frame.parent
        frame.vars.clear()
        frame.parent = None

    # --- Command Registry ---

    def get_command(self, name: str) -> Optional[Command]:
        return self.commands.get(name)

    def _register(self, cmd: Command):
        if cmd.name in self.commands:
            raise DuplicateCommand(cmd.name)
        self.commands[cmd.name] = cmd

    def register_command(self, name: str, func: CommandFunc, private_data: Any = None):
        self._register(NativeCommand(name, func, private_data))

    def register_procedure(self, name: str, params: List[str], body: str):
        self._register(Procedure(name, params, body))

    # --- Dispatch ---

    def call(self, argv: List[str]) -> Status:
        """Invokes the command named by argv[0] with the full word list."""
        cmd = self.get_command(argv[0])
        if cmd is None:
            return self.fail(UnknownCommand(argv[0]))
        self._dbg("call", argv[0], "argc", len(argv))
        try:
            match cmd:
                case Procedure():
                    return self._call_procedure(cmd, argv)
                case NativeCommand():
                    return cmd.func(self, argv, cmd.private_data)
                case _:
                    raise TypeError(f"unsupported command definition {cmd!r}")
        except PicolError as e:
            return self.fail(e)

    def _call_procedure(self, proc: Procedure, argv: List[str]) -> Status:
        if len(proc.params) != len(argv) - 1:
            raise WrongArity(argv[0])
        self.push_frame()
        try:
            for name, value in zip(proc.params, argv[1:]):
                self.set_var(name, value)
            status = self.eval(proc.body)
        finally:
            self.pop_frame()
        self._dbg("proc", proc.name, "->", status)
        if status is Status.RETURN:
            return Status.OK
        return status

    # --- Evaluation ---

    def evaluate(self, script: str) -> Tuple[Status, str]:
        """Public entry point: runs `script`, returns (status, result text)."""
        status = self.eval(script)
        return status, self.result

    def eval(self, script: str) -> Status:
        self.level += 1
        try:
            if self.level > self.max_depth:
                self._dbg("recursion limit", self.max_depth)
                return self.fail(RecursionLimitExceeded(self.max_depth))
            return self._eval(script)
        finally:
            self.level -= 1

    def _eval(self, script: str) -> Status:
        lexer = Lexer(script)
        argv: List[str] = []
        self.set_result("")

        while True:
            prev = lexer.type
            token = lexer.next_token()
            typ = token.type
            if typ is TokenType.EOF:
                break

            text = token.text
            if typ is TokenType.VAR:
                value = self.get_var(text)
                if value is None:
                    return self.fail(UnknownVariable(text))
                text = value
            elif typ is TokenType.CMD:
                status = self.eval(text)
                if status is not Status.OK:
                    return status
                text = self.result
            elif typ is TokenType.ESC:
                text = unescape(text)
            elif typ is TokenType.SEP:
                continue

            if typ is TokenType.EOL:
                if argv:
                    status = self.call(argv)
                    if status is not Status.OK:
                        return status
                argv = []
                continue

            # Adjacent tokens with no separator form one word: abc$x, foo[bar]baz
            if prev is TokenType.SEP or prev is TokenType.EOL:
                argv.append(text)
            else:
                argv[-1] += text

        return Status.OK
