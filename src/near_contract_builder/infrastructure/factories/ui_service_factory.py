"""
Factory for creating UI service instances.
"""
import logging
from typing import Any, Dict

from near_contract_builder.domain.ports.ui_service import UIServicePort
from near_contract_builder.infrastructure.adapters.ui.rich_ui_adapter import RichUIAdapter
from near_contract_builder.infrastructure.adapters.ui.tqdm_ui_adapter import TqdmUIAdapter

logger = logging.getLogger(__name__)


def create_ui_service(config: Dict[str, Any]) -> UIServicePort:
    """
    Create a UI service based on configuration.

    Args:
        config: The application configuration

    Returns:
        An implementation of UIServicePort
    """
    ui_config = config.get("ui", {}) or {}
    ui_type = str(ui_config.get("type", "rich")).lower()

    if ui_type == "tqdm":
        return TqdmUIAdapter()
    if ui_type != "rich":
        logger.warning(f"Unknown ui.type '{ui_type}', using rich")
    return RichUIAdapter(config)
