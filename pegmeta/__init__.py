"""Abstract syntax trees and optimization passes for PEG grammar rules."""

__version__ = "0.1.0"
__all__ = ["ast", "nodes", "optimized", "optimizer", "passes", "restorer"]