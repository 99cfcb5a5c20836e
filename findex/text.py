"""Centralized user-facing text for the findex CLI."""

from __future__ import annotations


class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TABLE_HEADER = "bold magenta"
    HIGHLIGHT = "bold yellow"


class Messages:
    APP_HELP = "findex – fuzzy search over the files of indexed directories."
    HELP_QUERY = "Text fuzzy-matched against indexed file paths."
    HELP_SEARCH_PATH = "Root directory to search (defaults to the most recent root)."
    HELP_SEARCH_TOP = "Maximum number of results to display (0 = all)."
    HELP_SEARCH_FORMAT = "Output format: rich table or tab-separated porcelain lines."
    HELP_INDEX_PATH = "Root directory to walk when building the index."
    HELP_USE_PATH = "Directory that becomes the active root."
    HELP_GET_PATH = "File path relative to the active root."
    HELP_GET_ROOT = "Root directory the file belongs to (defaults to the most recent root)."
    HELP_GET_OUTPUT = "Directory that receives the downloaded copy."
    HELP_PURGE_YES = "Skip the confirmation prompt."
    HELP_VERBOSE = "Emit debug logging on stderr."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_SEARCH_LIMIT = "Set the default number of search results (0 = all)."
    HELP_SET_AUTO_INDEX = "Build a missing index automatically before searching (true/false)."
    HELP_SET_LOG_LEVEL = "Set the default log level (DEBUG, INFO, WARNING, ERROR)."

    ERROR_TOP_NEGATIVE = "top must be >= 0"
    ERROR_SEARCH_LIMIT_NEGATIVE = "Search limit must be >= 0"
    ERROR_BOOLEAN_INVALID = "Invalid boolean value: {value}. Use true/false."
    ERROR_LOG_LEVEL_INVALID = "Unsupported log level: {value}. Allowed: {allowed}."
    ERROR_CONFIG_VALUE_INVALID = "Config field {field} has an invalid value."
    ERROR_DIRECTORY_MISSING = "Directory does not exist: {path}"
    ERROR_NOT_A_DIRECTORY = "Path is not a directory: {path}"
    ERROR_NO_ACTIVE_ROOT = "No active root selected. Run `findex use <path>` first."
    ERROR_DOWNLOAD_REJECTED = "Cannot download {path}: {reason}."
    ERROR_READ_FAILED = "Unable to read {path} ({reason})."

    REASON_EMPTY = "empty path"
    REASON_TRAVERSAL = "parent directory segments are not allowed"
    REASON_OUTSIDE_ROOT = "path escapes the active root"
    REASON_NOT_FOUND = "file not found"
    REASON_NOT_A_FILE = "not a regular file"
    REASON_NO_ACTIVE_ROOT = "no active root"

    INFO_NO_FILES = "No files found in the selected directory."
    INFO_NO_RESULTS = "No matching files found."
    INFO_INDEX_RUNNING = "Indexing files under {path}..."
    INFO_INDEX_DONE = "Indexed {count} file{plural} under {path} at {timestamp}."
    INFO_INDEX_MISSING = (
        "No index found for {path}. Run `findex index --path \"{path}\"` first."
    )
    INFO_ACTIVE_ROOT = "Active root: {path} ({count} file{plural}, indexed {timestamp})."
    INFO_NEVER_INDEXED = "never"
    INFO_ROOTS_EMPTY = "No recently used roots."
    INFO_PURGED = "All index snapshots deleted ({count} removed)."
    INFO_PURGE_CONFIRM = "Delete every stored index snapshot?"
    INFO_PURGE_ABORTED = "Purge cancelled."
    INFO_DOWNLOADED = "Saved {source} to {target}."
    INFO_SEARCH_LIMIT_SET = "Default search limit set to {value}."
    INFO_AUTO_INDEX_SET = "Auto index set to {value}."
    INFO_LOG_LEVEL_SET = "Log level set to {value}."
    INFO_CONFIG_SUMMARY = (
        "Search limit: {limit}\n"
        "Auto index: {auto_index}\n"
        "Log level: {log_level}\n"
        "Config file: {path}"
    )

    TABLE_TITLE = "findex fuzzy search results"
    TABLE_ROOTS_TITLE = "Recently used roots"
    TABLE_HEADER_INDEX = "#"
    TABLE_HEADER_SCORE = "Score"
    TABLE_HEADER_PATH = "File path"
    TABLE_HEADER_ROOT = "Root"
    TABLE_HEADER_FILES = "Files"
    TABLE_HEADER_LAST_INDEXED = "Last indexed"
