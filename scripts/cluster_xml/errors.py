"""Exception hierarchy for cluster XML handling."""

from __future__ import annotations


class ClusterXmlError(Exception):
    """Base class for every error raised by cluster_xml."""


class XmlParseError(ClusterXmlError):
    """Raised when cluster XML text is malformed or has the wrong root element.

    Actionable: the message says what went wrong, where, and how to fix it.
    """


class DocumentShapeError(ClusterXmlError):
    """Raised when a raw tree cannot be mapped onto the typed document model.

    Example: two <name> elements inside a single <cluster>, where the model
    allows exactly one.
    """
