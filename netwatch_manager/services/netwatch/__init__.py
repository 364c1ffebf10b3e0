from .interface import NetwatchInterface
from .factory import NetwatchChannelFactory
from .channel import build_channel, build_channel_from_config, fetch_rules, is_configured, netwatch_session
from .classify import ClassifiedError, ErrorCategory, classify_error
