"""agentloom: keep one central set of agent skills linked into every AI coding tool."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("agentloom")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
