import asyncio
import json
import os
import signal
import stat

import pytest

from near_contract_builder.infrastructure.adapters.build_system import cargo_adapter
from near_contract_builder.infrastructure.adapters.build_system.cargo_adapter import CARGO_BUILD_ARGS, CargoAdapter

from cargo_messages import artifact_message, compiler_message, span


@pytest.fixture
def adapter(sink):
    return CargoAdapter({"build_system": {"command": "cargo", "read_chunk_size": 64}}, output_sink=sink)


@pytest.mark.asyncio
async def test_runs_release_build_in_project_folder(adapter, fake_cargo, contract_dir):
    await adapter.build(str(contract_dir))

    [call] = fake_cargo.calls
    assert call["args"] == [
        "cargo", "build", "--target", "wasm32-unknown-unknown", "--release", "--message-format", "json",
    ]
    assert call["kwargs"]["cwd"] == str(contract_dir)


@pytest.mark.asyncio
async def test_successful_build(adapter, fake_cargo, contract_dir):
    wasm = str(contract_dir / "target" / "wasm32-unknown-unknown" / "release" / "hello_near.wasm")
    fake_cargo.emit(
        compiler_message(level="warning", message="unused variable: `x`"),
        artifact_message(wasm),
        {"reason": "build-finished", "success": True},
    )

    outcome = await adapter.build(str(contract_dir))

    assert outcome.success is True
    assert outcome.exit_code == 0
    assert outcome.artifact.path == wasm
    assert outcome.diagnostics.count() == 1


@pytest.mark.asyncio
async def test_failed_build_reports_diagnostics(adapter, fake_cargo, contract_dir):
    fake_cargo.emit(
        compiler_message(spans=[span(file_name="src/lib.rs", line_start=12, line_end=12)]),
        {"reason": "build-finished", "success": False},
    )
    fake_cargo.returncode = 101

    outcome = await adapter.build(str(contract_dir))

    assert outcome.success is False
    assert outcome.exit_code == 101
    assert outcome.artifact is None
    [diagnostic] = outcome.diagnostics.for_file("src/lib.rs")
    assert diagnostic.range.start.line == 11


@pytest.mark.asyncio
async def test_odd_chunk_boundaries(adapter, fake_cargo, contract_dir):
    data = b"".join(
        (json.dumps(message) + "\r\n").encode("utf-8")
        for message in (
            compiler_message(message="naïve ✓", spans=[span(file_name="src/a.rs")]),
            compiler_message(spans=[span(file_name="src/b.rs")]),
        )
    )
    fake_cargo.stdout = [data[i:i + 5] for i in range(0, len(data), 5)]
    fake_cargo.returncode = 101

    outcome = await adapter.build(str(contract_dir))

    assert outcome.diagnostics.files() == ["src/a.rs", "src/b.rs"]
    assert outcome.diagnostics.for_file("src/a.rs")[0].message == "naïve ✓"


@pytest.mark.asyncio
async def test_stderr_is_forwarded_to_the_sink(adapter, fake_cargo, contract_dir, sink):
    fake_cargo.stderr = [b"   Compiling hello_near v0.1.0\n", b"    Finished `release` profile\n"]

    await adapter.build(str(contract_dir))

    assert sink.text == "   Compiling hello_near v0.1.0\n    Finished `release` profile\n"
    assert sink.lines[0] == f"Building contract in: {contract_dir}"
    assert sink.flushed == 1


@pytest.mark.asyncio
async def test_missing_target_on_stderr(adapter, fake_cargo, contract_dir):
    fake_cargo.stderr = [b"error[E0463]: can't find crate for `core`\n", b"  = note: the `wasm32-unknown-unknown` "]
    fake_cargo.stderr.append(b"target may not be installed\n")
    fake_cargo.returncode = 101

    outcome = await adapter.build(str(contract_dir))

    assert outcome.toolchain_errors == [
        "The wasm32-unknown-unknown target may not be installed. Run `rustup target add wasm32-unknown-unknown`."
    ]


@pytest.mark.asyncio
async def test_spawn_failure_becomes_an_outcome(sink, contract_dir, tmp_path):
    missing = str(tmp_path / "no-such-cargo")
    adapter = CargoAdapter({"build_system": {"command": missing}}, output_sink=sink)

    outcome = await adapter.build(str(contract_dir))

    assert outcome.success is False
    assert outcome.exit_code is None
    assert outcome.spawn_failed
    assert outcome.toolchain_errors[0].startswith(f"Could not start `{missing}`")
    assert any(line.startswith("Failed to start") for line in sink.lines)


@pytest.mark.skipif(os.name != "posix", reason="uses a shell script as the cargo command")
@pytest.mark.asyncio
async def test_real_process(sink, contract_dir, tmp_path):
    wasm = str(contract_dir / "target" / "hello_near.wasm")
    script = tmp_path / "fake-cargo"
    script.write_text(
        "#!/bin/sh\n"
        f"echo '{json.dumps(artifact_message(wasm))}'\n"
        "echo '   Compiling hello_near v0.1.0' >&2\n"
        "exit 0\n",
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    adapter = CargoAdapter({"build_system": {"command": str(script)}}, output_sink=sink)

    outcome = await adapter.build(str(contract_dir))

    assert outcome.success is True
    assert outcome.artifact.path == wasm
    assert "Compiling hello_near" in sink.text


def test_build_info_lists_fixed_arguments(sink, tmp_path):
    adapter = CargoAdapter({"build_system": {"command": str(tmp_path / "no-such-cargo")}}, output_sink=sink)
    info = adapter.get_build_info()

    assert info["arguments"] == list(CARGO_BUILD_ARGS)
    assert info["target"] == "wasm32-unknown-unknown"
    assert info["verified"] is False


def test_parse_cargo_version(adapter):
    assert adapter._parse_cargo_version("cargo 1.82.0 (8f40fc59f 2024-08-21)\n") == "cargo 1.82.0"
    assert adapter._parse_cargo_version("something else") == "Unknown cargo version"


class StalledProcess:
    """A cargo process that keeps its pipes open until its group is killed."""

    def __init__(self):
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.pid = 4242
        self.returncode = None
        self.waits = 0
        self._exited = asyncio.Event()

    async def wait(self):
        self.waits += 1
        await self._exited.wait()
        return self.returncode

    def exit_killed(self):
        self.returncode = -signal.SIGKILL
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._exited.set()

    def kill(self):
        self.exit_killed()


@pytest.mark.skipif(os.name != "posix", reason="process groups are POSIX only")
@pytest.mark.asyncio
async def test_cancelled_build_kills_process_group_and_reaps_it(adapter, contract_dir, monkeypatch):
    process = StalledProcess()
    started = asyncio.Event()
    killed = []

    async def create_subprocess_exec(*args, **kwargs):
        started.set()
        return process

    def killpg(pid, sig):
        killed.append((pid, sig))
        process.exit_killed()

    monkeypatch.setattr(cargo_adapter.asyncio, "create_subprocess_exec", create_subprocess_exec)
    monkeypatch.setattr(cargo_adapter.os, "killpg", killpg)

    build = asyncio.ensure_future(adapter.build(str(contract_dir)))
    await started.wait()
    await asyncio.sleep(0)
    build.cancel()
    with pytest.raises(asyncio.CancelledError):
        await build

    assert killed == [(4242, signal.SIGKILL)]
    assert process.returncode == -signal.SIGKILL
    assert process.waits >= 2
