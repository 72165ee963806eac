# src/near_contract_builder/cli/commands/build_command.py
import argparse
import asyncio
import json
import logging
import os
from typing import Any, Dict

from near_contract_builder.application.services.outcome_presenter import OutcomePresenter
from near_contract_builder.application.services.ui_service import UIService
from near_contract_builder.application.use_cases.build_contract import BuildContractUseCase
from near_contract_builder.cli.adapter_factory import create_build_system, create_output_sink, create_ui_service
from near_contract_builder.domain.exceptions import InvalidProjectError
from near_contract_builder.domain.ports.ui_service import LogLevel
from near_contract_builder.infrastructure.adapters.output.status_output_sink import StatusOutputSink

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BUILD_FAILED = 1
EXIT_INVALID_PROJECT = 2


def handle_build(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Handles the 'build' command logic and returns the process exit status."""
    if args.json:
        use_case = BuildContractUseCase(build_system=create_build_system(config), config=config)
        try:
            report = asyncio.run(use_case.execute(args.folder))
        except InvalidProjectError as e:
            print(json.dumps({"error": str(e)}))
            return EXIT_INVALID_PROJECT
        print(json.dumps(report.outcome.to_dict(), indent=2))
        return EXIT_OK if report.ready_to_deploy else EXIT_BUILD_FAILED

    ui = UIService(create_ui_service(config))
    label = f"Building {os.path.basename(os.path.abspath(args.folder))}"
    status = ui.status(f"{label}...")
    sink = StatusOutputSink(status, create_output_sink(config), label)
    use_case = BuildContractUseCase(build_system=create_build_system(config, sink), config=config)
    try:
        report = asyncio.run(use_case.execute(args.folder))
    except InvalidProjectError as e:
        ui.log(f"Invalid contract folder: {e}", LogLevel.ERROR)
        return EXIT_INVALID_PROJECT
    finally:
        status.stop()
        ui.close()

    OutcomePresenter(ui).present(report)
    return EXIT_OK if report.ready_to_deploy else EXIT_BUILD_FAILED
