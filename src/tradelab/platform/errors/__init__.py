from .configuration_error import ConfigurationError, configuration_error
from .tradelab_error import TradelabError

__all__ = [
    "ConfigurationError",
    "TradelabError",
    "configuration_error",
]
