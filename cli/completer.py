"""Custom completer for PageVault CLI with document path autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, SUPPORTED_FILE_EXTENSIONS


class PageVaultCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local path completion for the 'upload' command (directories and
      .html/.htm/.md/.markdown files)
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        already_typed = set(tokens[1:])
        if not is_typing_new_token:
            already_typed.discard(current_word)

        yield from self._complete_paths(current_word, already_typed)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str, exclude: set) -> Iterable[Completion]:
        """
        Complete paths relative to the current directory.

        Directories are offered with a trailing slash so the user can descend;
        files are offered only when their extension is supported.
        """
        if "/" in partial:
            dir_part, _, name_part = partial.rpartition("/")
            base = Path(dir_part or "/").expanduser()
            prefix = f"{dir_part}/"
        else:
            base = Path.cwd()
            name_part = partial
            prefix = ""

        try:
            entries = sorted(base.iterdir(), key=lambda p: p.name)
        except OSError:
            return

        name_lower = name_part.lower()
        for item in entries:
            if item.name.startswith(".") and not name_part.startswith("."):
                continue
            if not item.name.lower().startswith(name_lower):
                continue

            if item.is_dir():
                candidate = f"{prefix}{item.name}/"
            elif item.name.lower().endswith(SUPPORTED_FILE_EXTENSIONS):
                candidate = f"{prefix}{item.name}"
            else:
                continue

            if candidate in exclude:
                continue
            yield Completion(candidate, start_position=-len(partial))
