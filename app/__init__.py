# -*- coding: utf-8 -*-
"""
Asset Console Application Core Module
"""

from .config import Config

__version__ = Config.VERSION

__all__ = ["Config", "__version__"]
