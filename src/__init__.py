"""lexassist: model orchestration for a multimodal legal assistant."""

from lexassist.version import __version__

__all__ = ["__version__"]
