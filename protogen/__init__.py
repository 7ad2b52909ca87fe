"""Protogen - Field code-generation model for protocol buffer compilers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protogen")
except PackageNotFoundError:
    __version__ = "(local)"
