"""
Constants
Centralised storage for artifact names, file suffixes and placeholder markers.
"""
PAYLOAD_FILENAME = "openai_payload.json"
FIX_DATA_FILENAME = "ai-fix.json"
FIX_SUMMARY_FILENAME = "fix-summary.json"

RAW_DOM_SUFFIX = ".html"
CLEAN_DOM_SUFFIX = "-clean.html"
CONTEXT_SUFFIX = ".context.json"
BACKUP_SUFFIX = ".backup"

UNKNOWN = "Unknown"
UNKNOWN_LOCATION = "unknown"

REQUIRED_FIX_FIELDS = ("file", "line", "column", "oldCode", "newCode", "reason")
