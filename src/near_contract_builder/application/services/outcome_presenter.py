"""
Presents a BuildReport on the console.
"""
import logging
import os
from typing import Dict, List

from near_contract_builder.application.services.ui_service import UIService
from near_contract_builder.domain.models.build_outcome import BuildOutcome, BuildReport, CompilerDiagnostic, Severity
from near_contract_builder.domain.ports.ui_service import LogLevel

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".rs"


def publishable_diagnostics(outcome: BuildOutcome, project_dir: str) -> Dict[str, List[CompilerDiagnostic]]:
    """
    Maps per-file diagnostics onto absolute source paths.

    Relative paths are taken relative to the project folder; files that are not
    Rust sources (e.g. build scripts' generated files) are left out.
    """
    published: Dict[str, List[CompilerDiagnostic]] = {}
    for file_path, diagnostics in outcome.diagnostics.items():
        target = file_path if os.path.isabs(file_path) else os.path.join(project_dir, file_path)
        if not target.endswith(SOURCE_EXTENSION):
            logger.debug(f"Not publishing diagnostics for non-source file {file_path}")
            continue
        published.setdefault(os.path.normpath(target), []).extend(diagnostics)
    return published


class OutcomePresenter:
    """Renders a build report through the UI service."""

    def __init__(self, ui: UIService):
        self.ui = ui

    def present(self, report: BuildReport) -> None:
        outcome = report.outcome
        published = publishable_diagnostics(outcome, report.project_dir)

        if published:
            table = self.ui.table(["Severity", "Location", "Message", "Docs"], title="Diagnostics")
            for path, diagnostics in published.items():
                relative = os.path.relpath(path, report.project_dir)
                for diagnostic in diagnostics:
                    start = diagnostic.range.start
                    table.add_row(
                        diagnostic.severity.value,
                        f"{relative}:{start.line + 1}:{start.character + 1}",
                        self._first_line(diagnostic.message),
                        diagnostic.documentation_url or "",
                    )
            table.render()

        if outcome.toolchain_errors:
            hint = "\n".join(outcome.toolchain_errors)
            self.ui.log(f"Toolchain warning: {hint}", LogLevel.WARNING)

        errors = outcome.diagnostics.count(Severity.ERROR)
        warnings = outcome.diagnostics.count(Severity.WARNING)
        summary = f"{errors} error(s), {warnings} warning(s)"

        if outcome.spawn_failed:
            self.ui.panel(f"cargo could not be started.\n{summary}", "Build Failed", border_style="red")
        elif not outcome.success:
            self.ui.panel(
                f"Build failed with exit code {outcome.exit_code} - check output for details.\n{summary}",
                "Build Failed",
                border_style="red",
            )
        elif outcome.missing_artifact:
            self.ui.panel(
                f"Build succeeded but no .wasm artifact was found.\n{summary}",
                "Build Succeeded",
                border_style="yellow",
            )
        else:
            self.ui.panel(
                f"Artifact: {outcome.artifact.path}\n{summary}",
                "Build Succeeded",
                border_style="green",
            )

    @staticmethod
    def _first_line(text: str) -> str:
        return text.splitlines()[0] if text else ""
