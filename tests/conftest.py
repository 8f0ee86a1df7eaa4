"""Shared test fixtures and configuration."""

import json
import tempfile
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest
from loguru import logger

from committer.llm import StreamingClient


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def log_records():
    """Capture loguru messages (all levels) for the duration of a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def sample_diff_text():
    """git diff output covering modify, add, delete and rename."""
    return """diff --git a/src/app.py b/src/app.py
index 1234567..abcdefg 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,5 +1,8 @@
 def main():
-    print("old")
+    print("new")
+
+def helper():
+    return True
diff --git a/src/new_module.py b/src/new_module.py
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/src/new_module.py
@@ -0,0 +1,2 @@
+def hello():
+    print("Hello, world!")
diff --git a/old_notes.txt b/old_notes.txt
deleted file mode 100644
index e69de29..0000000
--- a/old_notes.txt
+++ /dev/null
@@ -1 +0,0 @@
-remember the milk
diff --git a/docs/guide.md b/docs/manual.md
similarity index 90%
rename from docs/guide.md
rename to docs/manual.md
index 1111111..2222222 100644
--- a/docs/guide.md
+++ b/docs/manual.md
@@ -1,2 +1,2 @@
-# Guide
+# Manual
 Read me.
"""


def make_file_diff(path: str, added_lines: int, line_width: int = 20, new_file: bool = False) -> str:
    """Build the git diff text of one file adding added_lines lines."""
    header = [f"diff --git a/{path} b/{path}"]
    if new_file:
        header += ["new file mode 100644", "index 0000000..1111111", "--- /dev/null"]
    else:
        header += ["index 1111111..2222222 100644", f"--- a/{path}"]
    header.append(f"+++ b/{path}")
    body = [f"@@ -0,0 +1,{added_lines} @@"]
    body += [f"+{'x' * (line_width - 8)}{i:06d}" for i in range(added_lines)]
    return "\n".join(header + body) + "\n"


@pytest.fixture
def file_diff():
    """Factory for single-file diff text."""
    return make_file_diff


@pytest.fixture
def lock_and_app_diff_text():
    """A 200-line lock-file change plus a 20-line application change."""
    return make_file_diff("package-lock.json", 200) + make_file_diff("src/auth/token.py", 20)


# ============================================================
# Provider stream simulation
# ============================================================


class ChunkStream(httpx.SyncByteStream):
    """Response body that yields fixed chunks, then optionally raises."""

    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.reads = 0
        self.closed = False

    def __iter__(self):
        for chunk in self.chunks:
            self.reads += 1
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


def sse_data(payload) -> bytes:
    return f"data: {json.dumps(payload)}\n\n".encode("utf-8")


def delta_frame(text: str, finish_reason=None) -> bytes:
    return sse_data({"choices": [{"delta": {"content": text}, "finish_reason": finish_reason}]})


DONE_FRAME = b"data: [DONE]\n\n"


@pytest.fixture
def sse():
    """Helpers for building server-sent-event bytes."""
    return SimpleNamespace(data=sse_data, delta=delta_frame, done=DONE_FRAME)


@pytest.fixture
def provider():
    """Factory for a StreamingClient backed by an httpx.MockTransport.

    provider(chunks, error=None, status_code=200, headers=None, body=None, **client_kwargs)
    returns a namespace with client, stream and the list of sent requests.
    """
    clients = []

    def factory(chunks=(), error=None, status_code=200, headers=None, body=None, **client_kwargs):
        stream = ChunkStream(chunks, error)
        requests = []

        def handler(request):
            requests.append(request)
            if status_code >= 400:
                return httpx.Response(status_code, headers=headers, content=body or b"")
            return httpx.Response(
                status_code,
                headers={"content-type": "text/event-stream", **(headers or {})},
                stream=stream,
            )

        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(http_client)
        client = StreamingClient("sk-or-test", http_client=http_client, **client_kwargs)
        return SimpleNamespace(client=client, stream=stream, requests=requests)

    yield factory

    for http_client in clients:
        http_client.close()
