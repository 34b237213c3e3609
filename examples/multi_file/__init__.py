"""Blocks split across modules.

Import all blocks with: from multi_file import *
"""

from .network import *
from .compute import *

__all__ = [
    # Network
    "vpc",
    "web_sg",
    # Compute
    "deployer",
    "web",
]
