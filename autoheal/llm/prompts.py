"""
LLM Prompts
===========
Centralised store for the test-healing system prompt and user template.

Prompt Design Rules:
    - Selector / locator / expected-text fixes only
    - One edit to one line, expressed as an exact substring replacement
    - "oldCode" must be copied verbatim from the test file, or the applier
      rejects the fix
    - When the error location is "unknown", the model must infer the line
      from the test source rather than inventing numbers

Template placeholders are ``{{NAME}}`` markers; PLACEHOLDERS lists every
name the payload builder knows how to fill.
"""
import logging

logger = logging.getLogger(__name__)


PLACEHOLDERS = (
    "TEST_NAME",
    "TEST_FILE",
    "TEST_CONTENT",
    "DOM_CONTENT",
    "ERROR_MESSAGE",
    "ERROR_LOCATION",
    "REPOSITORY",
    "WORKFLOW_NAME",
    "FAILURE_URL",
)


# ---------------------------------------------------------------------------
# System Prompt
# ---------------------------------------------------------------------------
SYSTEM_PROMPT = (
    "You are an expert test automation engineer specializing in fixing Cypress test failures.\n"
    "Your expertise includes:\n"
    "- Cypress selector strategies and best practices\n"
    "- DOM analysis and element identification\n"
    "- Test failure diagnosis and resolution\n"
    "- Web application testing patterns\n"
    "\n"
    "Analyze test failures and provide specific selector/locator fixes."
)


# ---------------------------------------------------------------------------
# User Prompt Template
# ---------------------------------------------------------------------------
USER_PROMPT_TEMPLATE = """Analyze the following test failure and provide a specific selector/locator fix.

**INSTRUCTIONS:**
1. Compare the test expectations with the actual DOM content
2. Identify why selectors are failing (element not found, text mismatch, etc.)
3. Provide the exact code change needed to fix the test
4. Focus on selector/locator fixes only, on a single line
5. "oldCode" must appear verbatim on the line you name
6. If the error location below is "unknown", infer the line from the test source; do not guess numbers that are not supported by the source
7. Respond in JSON format with 'analysis' and 'fix' fields

**FAILING TEST:** {{TEST_NAME}}

**TEST FILE ({{TEST_FILE}}):**
```javascript
{{TEST_CONTENT}}
```

**ERROR:**
{{ERROR_MESSAGE}}

**ERROR LOCATION:** {{ERROR_LOCATION}}

**ACTUAL DOM CONTENT:**
```html
{{DOM_CONTENT}}
```

**WORKFLOW INFO:**
- Repository: {{REPOSITORY}}
- Workflow: {{WORKFLOW_NAME}}
- Failure URL: {{FAILURE_URL}}

**RESPONSE FORMAT:**
```json
{
  "analysis": "Brief description of the issue",
  "fix": {
    "file": "tests/e2e/new-todo.spec.js",
    "line": 7,
    "column": 5,
    "oldCode": "'todos'",
    "newCode": "\\"todo's\\"",
    "reason": "Update expected text to match actual heading content"
  }
}
```

Provide your analysis and fix in the exact JSON format above."""
