"""Command parser for CLI input."""

import shlex
from typing import Optional

from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    LoginCommand,
    ReindexCommand,
    SearchCommand,
    ShareCommand,
    SyncCommand,
    UploadCommand,
    WhoamiCommand,
)
from common.constants import SEARCH_MODES


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


_ENABLE_WORDS = {"on": True, "enable": True, "off": False, "disable": False}


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of the dataclasses in cli.models)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "login":
        return _parse_login(args)
    elif command_name == "whoami":
        _expect_no_args("whoami", args)
        return WhoamiCommand()
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "list":
        return _parse_list(args)
    elif command_name == "search":
        return _parse_search(args)
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "delete":
        return _parse_delete(args)
    elif command_name == "share":
        return _parse_share(args)
    elif command_name == "reindex":
        return _parse_reindex(args)
    elif command_name == "sync":
        _expect_no_args("sync", args)
        return SyncCommand()
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _expect_no_args(name: str, args: list[str]) -> None:
    if args:
        raise ParseError(f"{name} takes no arguments")


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <api_key>' command."""
    if len(args) != 1:
        raise ParseError("login requires exactly 1 argument: <api_key>")
    return LoginCommand(api_key=args[0])


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload file-list' command."""
    if not args:
        raise ParseError("upload requires at least one file")
    return UploadCommand(file_list=tuple(args))


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'list [#tag]' command."""
    if len(args) > 1:
        raise ParseError("list accepts at most one tag")
    if not args:
        return ListCommand()
    tag = args[0].lstrip("#")
    if not tag:
        raise ParseError("list tag must not be empty")
    return ListCommand(tag=tag)


def _parse_search(args: list[str]) -> SearchCommand:
    """Parse 'search <query...> [--mode m] [--tag t]' command."""
    terms = []
    mode: Optional[str] = None
    tag: Optional[str] = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--mode", "--tag"):
            if i + 1 >= len(args):
                raise ParseError(f"{arg} requires a value")
            value = args[i + 1]
            if arg == "--mode":
                if value not in SEARCH_MODES:
                    raise ParseError(f"Unknown search mode '{value}' (expected one of: {', '.join(SEARCH_MODES)})")
                mode = value
            else:
                tag = value.lstrip("#")
            i += 2
            continue
        terms.append(arg)
        i += 1

    if not terms:
        raise ParseError("search requires a query")

    return SearchCommand(query=" ".join(terms), mode=mode, tag=tag)


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("download requires 1 or 2 arguments: <file_id> [output_path]")

    file_id = args[0]
    output_path = args[1] if len(args) > 1 else None

    return DownloadCommand(file_id=file_id, output_path=output_path)


def _parse_delete(args: list[str]) -> DeleteCommand:
    if len(args) != 1:
        raise ParseError("delete requires exactly 1 argument: <file_id>")
    return DeleteCommand(file_id=args[0])


def _parse_share(args: list[str]) -> ShareCommand:
    """Parse 'share <file_id> [on|off]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("share requires 1 or 2 arguments: <file_id> [on|off]")

    enable = None
    if len(args) == 2:
        word = args[1].lower()
        if word not in _ENABLE_WORDS:
            raise ParseError("share state must be 'on' or 'off'")
        enable = _ENABLE_WORDS[word]

    return ShareCommand(file_id=args[0], enable=enable)


def _parse_reindex(args: list[str]) -> ReindexCommand:
    if not args:
        return ReindexCommand()
    if len(args) > 1:
        raise ParseError("reindex accepts at most one argument: [limit]")
    try:
        limit = int(args[0])
    except ValueError:
        raise ParseError(f"reindex limit must be an integer, got '{args[0]}'")
    if limit < 1 or limit > 1000:
        raise ParseError("reindex limit must be between 1 and 1000")
    return ReindexCommand(limit=limit)
