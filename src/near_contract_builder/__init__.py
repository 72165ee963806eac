"""
near-contract-builder: drives `cargo build` for NEAR Rust contracts and turns
its JSON message stream into per-file diagnostics and a resolved .wasm artifact.
"""

__version__ = "0.1.0"
