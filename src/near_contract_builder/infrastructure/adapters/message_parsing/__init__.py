"""
Parsers for cargo's JSON message stream.
"""

from near_contract_builder.infrastructure.adapters.message_parsing.cargo_message_parser import CargoMessageParser
from near_contract_builder.infrastructure.adapters.message_parsing.diagnostic_extractor import DiagnosticExtractor
from near_contract_builder.infrastructure.adapters.message_parsing.artifact_resolver import ArtifactResolver
from near_contract_builder.infrastructure.adapters.message_parsing.toolchain_error_classifier import ToolchainErrorClassifier

__all__ = [
    'CargoMessageParser',
    'DiagnosticExtractor',
    'ArtifactResolver',
    'ToolchainErrorClassifier',
]
