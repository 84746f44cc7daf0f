"""CLI entry point for agrivocab.

Usage:
  python -m agrivocab serve [--port PORT] [--host HOST] [--no-auto-import]
  python -m agrivocab stop
  python -m agrivocab status
  python -m agrivocab import [--file PATH]
  python -m agrivocab stats
"""
from __future__ import annotations

import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"
DEFAULT_PORT = 8766
NO_AUTO_IMPORT_ENV = "AGRIVOCAB_NO_AUTO_IMPORT"


def main(argv: list[str] | None = None):
    args = sys.argv[1:] if argv is None else argv
    command, rest = (args[0], args[1:]) if args else ("serve", [])

    commands = {
        "serve": lambda: _serve(rest),
        "stop": _stop,
        "status": _status,
        "import": lambda: _import_catalog(rest),
        "stats": _stats,
    }
    handler = commands.get(command)
    if handler is None:
        print(f"Unknown command: {command}")
        print("Commands: " + ", ".join(commands))
        sys.exit(1)
    handler()


def _option(args: list[str], name: str) -> str | None:
    """Value following *name* in args, or None."""
    if name in args:
        pos = args.index(name)
        if pos + 1 < len(args):
            return args[pos + 1]
    return None


def _server_pid() -> int | None:
    """PID of the running server; a PID file left by a dead process is removed."""
    try:
        pid = int(PID_FILE.read_text().strip())
    except (FileNotFoundError, ValueError):
        PID_FILE.unlink(missing_ok=True)
        return None
    try:
        os.kill(pid, 0)
    except (ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None
    return pid


def _stop() -> bool:
    pid = _server_pid()
    if pid is None:
        print("AgriVocab server is not running.")
        return False
    PID_FILE.unlink(missing_ok=True)
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        print(f"Server process {pid} already exited.")
        return False
    print(f"Sent stop signal to AgriVocab server (PID {pid}).")
    return True


def _status():
    pid = _server_pid()
    print("AgriVocab server is not running." if pid is None
          else f"AgriVocab server is running (PID {pid}).")


def _serve(args: list[str]):
    import uvicorn

    running = _server_pid()
    if running is not None:
        print(f"AgriVocab server already running (PID {running}). Run 'stop' first.")
        sys.exit(1)

    port = int(_option(args, "--port") or DEFAULT_PORT)
    host = _option(args, "--host") or "127.0.0.1"
    if "--no-auto-import" in args:
        os.environ[NO_AUTO_IMPORT_ENV] = "1"

    PID_FILE.write_text(str(os.getpid()))
    print(f"Starting AgriVocab on http://{host}:{port} (Ctrl+C to stop)")
    try:
        uvicorn.run("agrivocab.app:app", host=host, port=port, reload=False)
    finally:
        PID_FILE.unlink(missing_ok=True)
        os.environ.pop(NO_AUTO_IMPORT_ENV, None)


def _import_catalog(args: list[str]):
    from agrivocab.catalog import load_catalog, load_catalog_file
    from agrivocab.config import load_settings
    from agrivocab.db import Database
    from agrivocab.errors import AgriVocabError

    settings = load_settings()
    file_arg = _option(args, "--file")

    if file_arg is None and not settings.sheets_url:
        print("No sheet configured. Set sheets_url in config.json or pass --file PATH.")
        sys.exit(1)

    db = Database(settings.db_full_path)
    try:
        if file_arg:
            records = load_catalog_file(Path(file_arg))
            source = file_arg
        else:
            print(f"  Fetching: {settings.sheets_url}")
            records = load_catalog(settings)
            source = settings.sheets_url
        previous = db.get_word_count()
        n = db.import_catalog(records, source=source)
    except AgriVocabError as e:
        print(f"Import failed: {e}")
        sys.exit(1)
    finally:
        db.close()

    print(f"  {n} words imported")
    if previous and previous != n:
        print(f"  Note: catalog size changed ({previous} -> {n}); saved progress may point at other words.")


def _stats():
    from agrivocab.config import load_settings
    from agrivocab.db import Database
    from agrivocab.srs import progress_stats, recent_history

    settings = load_settings()
    db = Database(settings.db_full_path)
    progress = db.load_progress()
    stats = progress_stats(db.get_word_count(), progress)
    db.close()

    print("AgriVocab Stats")
    print("=" * 40)
    print(f"Total words:        {stats['total_words']}")
    print(f"Learned:            {stats['learned_words']}")
    print(f"Mastered:           {stats['mastered_words']}")
    print(f"Due for review:     {stats['review_pool_size']}")
    print(f"Sessions today:     {stats['today_sessions']} (goal {settings.daily_goal} words)")
    print(f"Sessions total:     {stats['total_sessions']}")
    print(f"Overall accuracy:   {stats['accuracy']}%")

    recent = recent_history(progress)
    if recent:
        print("\nRecent sessions")
        for h in recent:
            kind = "review" if h["type"] == "review" else "new words"
            print(f"  {h['date'][:10]}  {kind:10s} {h['correct']}/{h['total']} ({h['accuracy']}%)")


if __name__ == "__main__":
    main()
