"""wavpwl/errors.py — Error kinds raised by the converters.

Every failure a conversion can hit is one of:
  - CONFIGURATION  bad decimation, unresolvable column, bad option value
  - STRUCTURAL     empty file, no usable data rows
  - FORMAT         unparsable number, row too short for the selected column
  - IO             open/create/read/write failures from text or audio I/O
  - WARNING        non-fatal, reported but never raised (e.g. failed delete)
"""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    CONFIGURATION = "configuration"
    STRUCTURAL = "structural"
    FORMAT = "format"
    IO = "io"
    WARNING = "warning"


class ConversionError(Exception):
    """Base class; `kind` tells callers how far the failure reaches."""

    kind: ErrorKind = ErrorKind.IO

    @property
    def fatal(self) -> bool:
        return self.kind is not ErrorKind.WARNING


class ConfigurationError(ConversionError):
    kind = ErrorKind.CONFIGURATION


class StructuralError(ConversionError):
    kind = ErrorKind.STRUCTURAL


class PwlFormatError(ConversionError):
    kind = ErrorKind.FORMAT


class PwlIOError(ConversionError):
    kind = ErrorKind.IO


class ConversionWarning(ConversionError):
    kind = ErrorKind.WARNING
