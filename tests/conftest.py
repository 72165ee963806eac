import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest

from near_contract_builder.domain.ports.output_sink import OutputSinkPort
from near_contract_builder.infrastructure.adapters.build_system import cargo_adapter


class RecordingSink(OutputSinkPort):
    """Output sink that keeps everything it receives."""

    def __init__(self):
        self.chunks: List[str] = []
        self.lines: List[str] = []
        self.flushed = 0

    def append(self, text: str) -> None:
        self.chunks.append(text)

    def append_line(self, text: str) -> None:
        self.lines.append(text)

    def flush(self) -> None:
        self.flushed += 1

    @property
    def text(self) -> str:
        return "".join(self.chunks)


class FakeProcess:
    """Stands in for asyncio.subprocess.Process; streams are real StreamReaders."""

    def __init__(self, stdout_chunks: List[bytes], stderr_chunks: List[bytes], returncode: int):
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.pid = 4242
        self.returncode: Optional[int] = None
        self._final_returncode = returncode
        loop = asyncio.get_running_loop()
        self._feeders = [
            loop.create_task(self._feed(self.stdout, stdout_chunks)),
            loop.create_task(self._feed(self.stderr, stderr_chunks)),
        ]

    @staticmethod
    async def _feed(reader: asyncio.StreamReader, chunks: List[bytes]) -> None:
        for chunk in chunks:
            reader.feed_data(chunk)
            # Let the reader consume this chunk before the next one arrives
            await asyncio.sleep(0)
        reader.feed_eof()

    async def wait(self) -> int:
        await asyncio.gather(*self._feeders)
        self.returncode = self._final_returncode
        return self.returncode

    def kill(self) -> None:
        self.returncode = -9


class FakeCargo:
    """Configures what the patched create_subprocess_exec returns."""

    def __init__(self):
        self.stdout: List[bytes] = []
        self.stderr: List[bytes] = []
        self.returncode = 0
        self.calls: List[Dict[str, Any]] = []

    def emit(self, *messages: Dict[str, Any]) -> "FakeCargo":
        for message in messages:
            self.stdout.append((json.dumps(message) + "\n").encode("utf-8"))
        return self

    async def create_subprocess_exec(self, *args, **kwargs):
        self.calls.append({"args": list(args), "kwargs": kwargs})
        return FakeProcess(self.stdout, self.stderr, self.returncode)


@pytest.fixture
def fake_cargo(monkeypatch):
    fake = FakeCargo()
    monkeypatch.setattr(cargo_adapter.asyncio, "create_subprocess_exec", fake.create_subprocess_exec)
    return fake


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def contract_dir(tmp_path):
    project = tmp_path / "hello-near"
    (project / "src").mkdir(parents=True)
    (project / "Cargo.toml").write_text('[package]\nname = "hello_near"\nversion = "0.1.0"\n', encoding="utf-8")
    (project / "src" / "lib.rs").write_text("use near_sdk::near;\n", encoding="utf-8")
    return project
