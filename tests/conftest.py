"""Shared test fixtures for BugBuddy."""

from pathlib import Path

import pytest

from bugbuddy.config.schema import CredentialsConfig
from bugbuddy.models.context import CodeContext
from bugbuddy.models.document import SourceDocument


@pytest.fixture
def python_traceback() -> str:
    """Return a simple Python traceback as printed to a terminal."""
    return """Traceback (most recent call last):
  File "/home/user/project/app.py", line 3, in <module>
    print(total / count)
ZeroDivisionError: division by zero

Process finished with exit code 1
"""


@pytest.fixture
def javascript_error() -> str:
    """Return Node.js terminal output with a TypeError."""
    return """/home/user/project/index.js:4
    user.greet();
         ^

TypeError: user.greet is not a function
    at Object.<anonymous> (/home/user/project/index.js:4:10)
"""


@pytest.fixture
def java_error() -> str:
    """Return JVM terminal output with an uncaught exception."""
    return """Exception in thread "main" java.lang.NullPointerException: Cannot invoke "String.length()"
\tat Main.main(Main.java:5)
"""


@pytest.fixture
def javascript_document() -> SourceDocument:
    """Return a small JavaScript file with imports."""
    text = "\n".join(
        [
            "import fs from 'fs';",
            "const path = require('path');",
            "",
            "function main() {",
            "  const user = {};",
            "  user.greet();",
            "}",
            "import { readFile } from 'fs/promises';",
            "main();",
        ]
    )
    return SourceDocument(file_name="index.js", language="javascript", text=text)


@pytest.fixture
def python_document() -> SourceDocument:
    """Return a small Python file."""
    text = "import os\n\ntotal = 10\ncount = 0\nprint(total / count)\n"
    return SourceDocument(file_name="app.py", language="python", text=text)


@pytest.fixture
def sample_context() -> CodeContext:
    """Return a gathered context for a JavaScript error."""
    return CodeContext(
        code="  const user = {};\n  user.greet();\n}",
        file_name="index.js",
        language="javascript",
        error_line=6,
        start_line=5,
        end_line=7,
        full_file_content="...",
        imports=("import fs from 'fs';", "const path = require('path');"),
    )


@pytest.fixture
def credentials_config(tmp_path: Path) -> CredentialsConfig:
    """Return credential locations inside a temporary directory."""
    return CredentialsConfig(
        secrets_path=tmp_path / "config" / "secrets.json",
        env_file=tmp_path / ".env",
    )


@pytest.fixture(autouse=True)
def _no_real_api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep keys from the developer's environment out of the tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
