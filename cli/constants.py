"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

from common.constants import SEARCH_MODES, SUPPORTED_FILE_EXTENSIONS

COMMANDS = [
    "login", "whoami", "upload", "list", "search", "download", "delete",
    "share", "reindex", "sync", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#2E86DE bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;134;222m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
 ____                __     __          _ _
|  _ \\ __ _  __ _  __\\ \\   / /_ _ _   _| | |_
| |_) / _` |/ _` |/ _ \\ \\ / / _` | | | | | __|
|  __/ (_| | (_| |  __/\\ V / (_| | |_| | | |_
|_|   \\__,_|\\__, |\\___| \\_/ \\__,_|\\__,_|_|\\__|
            |___/
{RESET}"""

WELCOME_TITLE = "PageVault CLI - HTML and Markdown document vault"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "pagevault> "

HELP_TEXT = f"""Available commands:
  login <api_key>                          Verify and store your API key
  whoami                                   Show account and storage usage
  upload <file...>                         Upload .html/.htm/.md/.markdown files
  list [#tag]                              List your files, newest first
  search <query...> [--mode m] [--tag t]   Search files (modes: {', '.join(SEARCH_MODES)})
  download <file_id> [output_path]         Download a file (default: ./<filename>)
  delete <file_id>                         Delete a file
  share <file_id> [on|off]                 Create or toggle a share link
  reindex [limit]                          Admin: process one reindex batch
  sync                                     Admin: run a reconciliation sweep now
  clear                                    Clear screen and redisplay welcome message
  help                                     Show this help
  exit                                     Exit REPL

Examples:
  login pv_0f8c2a1e-1111-2222-3333-444455556666
  upload notes/meeting.md snapshots/article.html
  list #work
  search "quarterly report" --mode metadata --tag work
  share 3f2b9c1e-... off
  download 3f2b9c1e-... exported.html"""

__all__ = [
    "COMMANDS",
    "STYLE",
    "GREEN",
    "RESET",
    "LOGO",
    "WELCOME_TITLE",
    "WELCOME_HELP",
    "PROMPT_TEXT",
    "HELP_TEXT",
    "SUPPORTED_FILE_EXTENSIONS",
]
