import logging
from typing import Any, Dict, Optional

from near_contract_builder.domain.ports.build_system import BuildSystemPort
from near_contract_builder.domain.ports.output_sink import OutputSinkPort
from near_contract_builder.domain.ports.ui_service import UIServicePort
from near_contract_builder.infrastructure.adapters.build_system.cargo_adapter import CargoAdapter
from near_contract_builder.infrastructure.adapters.output.logging_output_sink import LoggingOutputSink
from near_contract_builder.infrastructure.factories.ui_service_factory import create_ui_service as _create_ui_service

logger = logging.getLogger(__name__)


def create_output_sink(config: Dict[str, Any]) -> OutputSinkPort:
    logger.debug("Creating LoggingOutputSink")
    return LoggingOutputSink()


def create_build_system(config: Dict[str, Any], output_sink: Optional[OutputSinkPort] = None) -> BuildSystemPort:
    build_type = config.get('build_system', {}).get('type', 'cargo')
    logger.debug(f"Creating BuildSystem for type: {build_type}")
    if build_type == 'cargo':
        return CargoAdapter(config, output_sink or create_output_sink(config))
    else:
        raise ValueError(f"Unsupported build system type: {build_type}")


def create_ui_service(config: Dict[str, Any]) -> UIServicePort:
    logger.debug(f"Creating UI service: {config.get('ui', {}).get('type', 'rich')}")
    return _create_ui_service(config)
