import asyncio
import sys
from pathlib import Path

from picol.picol_runtime import ScriptRunner, ExecutionResult
from picol.picol_datatypes import Status

PROMPT = "picol> "

# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)

def write_line(text: str):
    print(text, flush=True)

def print_result(result: ExecutionResult):
    line = result.format_line()
    if line:
        print(line)

async def run_script_file(file_path: str):
    """Run a picol script file non-interactively and exit with appropriate status."""
    runner = ScriptRunner(output=write_line)
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = runner.handle_script(source)
    print_result(result)
    if result.status is Status.ERR:
        raise SystemExit(1)

async def main():
    """Run a script file when provided, otherwise start the interactive REPL."""
    if len(sys.argv) > 1:
        await run_script_file(sys.argv[1])
        return

    runner = ScriptRunner(output=write_line)

    # REPL Loop
    while True:
        try:
            raw = await ainput(PROMPT)
            if raw == "":
                raise EOFError
            if raw.strip() == "exit":
                break
            print_result(runner.handle_script(raw))
        except EOFError:
            print("\nExiting.")
            break

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")
