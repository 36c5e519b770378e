from picol.picol_datatypes import Status, PicolError
from picol.picol_interpreter import Interpreter
from picol.picol_runtime import ScriptRunner, ExecutionResult, StdLib

__all__ = ["Status", "PicolError", "Interpreter", "ScriptRunner", "ExecutionResult", "StdLib"]
