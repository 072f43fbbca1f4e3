import logging

"""
Create the package logger. Swap stages log through it at debug and info, and recoverable failures
at warning.
"""

logger = logging.getLogger("tickswap")
logger.propagate = False
logger.setLevel(logging.INFO)
logger.addHandler(logging.StreamHandler())
