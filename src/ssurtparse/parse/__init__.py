__version__ = "0.1"

from .ipaddr import parse_ipv4
from .parse import ParsedUrl, SchemeClass, SPECIAL_SCHEMES, classify_scheme, default_port, parse_url, reverse_host, ssurt_host
