import asyncio
import sys
from pathlib import Path

from loguru import logger

from joy.joy_io import ainput
from joy.joy_runtime import JoyRunner


async def run_script_file(file_path: str):
    """Run a silly-joy script file non-interactively and exit with appropriate status."""
    runner = JoyRunner(reader=ainput)
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = await runner.handle_script(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)


async def main():
    """Run a script file when provided, otherwise start the interactive REPL."""
    args = sys.argv[1:]
    if "--debug" in args:
        args.remove("--debug")
        logger.enable("joy")
    if args:
        arg = args[0]
        # Treat the argument as a script file when it's not a flag; run_script_file handles missing files
        if not arg.startswith("-"):
            await run_script_file(arg)
            return

    print("silly-joy REPL")
    print("Type 'exit' or press Ctrl+D to quit; ':s' shows the stack.")

    # Input requested by a running program is read with the same prompt function.
    runner = JoyRunner(reader=lambda prompt: ainput(prompt))

    while True:
        try:
            raw = await ainput("> ")
            if raw == "":
                raise EOFError
            # Commands must start the line.
            if raw.startswith(":s"):
                for text in runner.stack_lines():
                    print(text)
                continue

            line = raw.strip()
            if not line:
                continue
            if line == "exit":
                break

            result = await runner.handle_script(line)
            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)

        except EOFError:
            print("\nExiting.")
            break
        except Exception as e:
            # Catch evaluation errors and print them nicely
            print(f"Error: {e}", file=sys.stderr)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")
