"""
Card Creatr CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (config/, bundle/) and top-level commands (commands/).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import add_config_arg, add_json_flag, add_output_arg, add_sync_flag
from ._utils import build_fallback, load_pipeline, write_output

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_config_arg",
    "add_json_flag",
    "add_output_arg",
    "add_sync_flag",
    # Utilities
    "build_fallback",
    "load_pipeline",
    "write_output",
]
