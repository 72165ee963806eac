import asyncio
import codecs
import logging
import os
import re
import shutil
import signal
import subprocess
from typing import Any, Callable, Dict, Optional, Tuple

from near_contract_builder.application.services.build_session import BuildSession
from near_contract_builder.domain.models.build_outcome import BuildOutcome
from near_contract_builder.domain.ports.build_system import BuildSystemPort
from near_contract_builder.domain.ports.output_sink import OutputSinkPort
from near_contract_builder.infrastructure.adapters.message_parsing.toolchain_error_classifier import CONTRACT_TARGET
from near_contract_builder.infrastructure.adapters.output.logging_output_sink import LoggingOutputSink

logger = logging.getLogger(__name__)

# JSON messages on stdout, release profile, contract target.
CARGO_BUILD_ARGS = ("build", "--target", CONTRACT_TARGET, "--release", "--message-format", "json")

DEFAULT_READ_CHUNK_SIZE = 4096


class CargoAdapter(BuildSystemPort):
    """Build system interaction implementation for cargo."""

    def __init__(self, config: Dict[str, Any], output_sink: Optional[OutputSinkPort] = None):
        self.config = config
        build_config = config.get('build_system', {}) or {}
        self.cargo_command = build_config.get('command', 'cargo')
        self.read_chunk_size = int(build_config.get('read_chunk_size', DEFAULT_READ_CHUNK_SIZE))
        self.version_timeout = build_config.get('version_timeout', 30)
        self.output_sink = output_sink or LoggingOutputSink()

    def verify_environment(self) -> Tuple[bool, str]:
        """Verifies that cargo can be launched."""
        logger.info("Verifying cargo environment...")

        if shutil.which(self.cargo_command) is None and not os.path.isfile(self.cargo_command):
            return False, f"Command {self.cargo_command} not found in PATH"

        try:
            result = subprocess.run(
                [self.cargo_command, '--version'],
                capture_output=True,
                text=True,
                timeout=self.version_timeout,
                check=False
            )
        except (subprocess.TimeoutExpired, subprocess.SubprocessError, OSError) as e:
            logger.warning(f"Error verifying cargo command {self.cargo_command}: {e}")
            return False, f"Failed to run {self.cargo_command} --version: {e}"

        if result.returncode != 0:
            return False, f"{self.cargo_command} --version exited with code {result.returncode}: {result.stderr.strip()}"
        return True, f"Cargo environment verified. Using {self.cargo_command} - {self._parse_cargo_version(result.stdout)}"

    def _parse_cargo_version(self, version_output: str) -> str:
        """Extract cargo version from version command output."""
        match = re.search(r'cargo ([\d.]+\S*)', version_output)
        if match:
            return f"cargo {match.group(1)}"
        return "Unknown cargo version"

    async def build(self, project_dir: str) -> BuildOutcome:
        """Runs the release build and parses its output while it streams."""
        command = [self.cargo_command, *CARGO_BUILD_ARGS]
        command_str = " ".join(command)
        session = BuildSession(project_dir)

        self.output_sink.append_line(f"Building contract in: {project_dir}")
        logger.info(f"Executing cargo command: {command_str}")

        session.mark_spawning()
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=project_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=(os.name == "posix"),
            )
        except OSError as e:
            logger.error(f"Could not start {self.cargo_command}: {e}")
            self.output_sink.append_line(f"Failed to start {self.cargo_command}: {e}")
            return session.fail_to_spawn(self.cargo_command, e)

        session.mark_streaming()
        stderr_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        def on_stderr(chunk: bytes) -> None:
            text = stderr_decoder.decode(chunk)
            if text:
                self.output_sink.append(text)
            session.feed_stderr(chunk)

        try:
            _, _, exit_code = await asyncio.gather(
                self._pump(process.stdout, session.feed_stdout),
                self._pump(process.stderr, on_stderr),
                process.wait(),
            )
        except BaseException:
            if process.returncode is None:
                logger.warning(f"Killing cargo process group {process.pid} after an unexpected error")
                self._kill(process)
                await asyncio.shield(process.wait())
            raise

        tail = stderr_decoder.decode(b"", final=True)
        if tail:
            self.output_sink.append(tail)
        self.output_sink.flush()

        outcome = session.finalize(exit_code)
        if outcome.success:
            logger.info(f"Build succeeded in {project_dir}")
        else:
            logger.info(
                f"Build failed with exit code {exit_code}: "
                f"{outcome.diagnostics.count()} diagnostic(s), {len(outcome.toolchain_errors)} toolchain error(s)"
            )
        return outcome

    def _kill(self, process) -> None:
        """Kills cargo and the rustc processes it started (same session on POSIX)."""
        try:
            if os.name == "posix":
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            logger.debug(f"cargo process {process.pid} already exited")

    async def _pump(self, stream: Optional[asyncio.StreamReader], on_chunk: Callable[[bytes], None]) -> None:
        """Reads `stream` to EOF, handing each chunk over as soon as it arrives."""
        if stream is None:
            return
        while True:
            chunk = await stream.read(self.read_chunk_size)
            if not chunk:
                break
            on_chunk(chunk)

    def get_build_info(self) -> Dict[str, Any]:
        """Returns information about the cargo build."""
        info = {
            "type": "cargo",
            "command": self.cargo_command,
            "arguments": list(CARGO_BUILD_ARGS),
            "target": CONTRACT_TARGET,
            "configuration": {
                "read_chunk_size": self.read_chunk_size,
                "version_timeout": self.version_timeout,
            },
        }
        success, message = self.verify_environment()
        info["verified"] = success
        info["version"] = message
        return info
