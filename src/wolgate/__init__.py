"""wolgate — Wake-on-LAN gateway for hosts with LAN and container networks."""

__version__ = "0.1.0"
