"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    OPENAI_API_KEY          — API key for the model provider (only needed by `request`)
    OPENAI_BASE_URL         — OpenAI-compatible endpoint root (default: https://api.openai.com/v1)
    OPENAI_MODEL            — Model name written into the request body (default: gpt-4)
    OPENAI_MAX_TOKENS       — max_tokens for the request body (default: 1000)
    OPENAI_TEMPERATURE      — temperature for the request body (default: 0.1)
    OPENAI_TIMEOUT_SECONDS  — HTTP timeout for the model call (default: 60)
    AUTOHEAL_OUTPUT_DIR     — Directory receiving payload / fix / summary artifacts (default: .)
    AUTOHEAL_FAILURES_DIR   — Directory the test runner drops failure DOMs into
    AUTOHEAL_WORKSPACE      — Root that fix / test file paths are relative to (default: .)
    AUTOHEAL_LOG_LEVEL      — Logging level name (default: INFO)

GitHub Actions metadata (substituted into the prompt, "Unknown" when absent):
    GITHUB_REPOSITORY, GITHUB_WORKFLOW, GITHUB_SERVER_URL, GITHUB_RUN_ID

Model parameters are configuration constants. They are never derived from
the failure being analysed.
"""
import os
from dotenv import load_dotenv

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")
OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", 1000))
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", 0.1))
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", 60))

# Artifact locations
OUTPUT_DIR = os.getenv("AUTOHEAL_OUTPUT_DIR", ".")
FAILURES_DIR = os.getenv("AUTOHEAL_FAILURES_DIR", "cypress/failures")
WORKSPACE = os.getenv("AUTOHEAL_WORKSPACE", ".")

LOG_LEVEL = os.getenv("AUTOHEAL_LOG_LEVEL", "INFO").upper()

# CI run metadata
GITHUB_REPOSITORY = os.getenv("GITHUB_REPOSITORY")
GITHUB_WORKFLOW = os.getenv("GITHUB_WORKFLOW")
GITHUB_SERVER_URL = os.getenv("GITHUB_SERVER_URL")
GITHUB_RUN_ID = os.getenv("GITHUB_RUN_ID")
