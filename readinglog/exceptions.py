"""
Exception types raised by the reading log core.
"""


class ReadingLogError(Exception):
    """Base class for all reading log errors"""


class CsvFormatError(ReadingLogError, ValueError):
    """CSV text could not be decoded at all"""


class EmptyImportError(ReadingLogError, ValueError):
    """CSV decoded but contained no importable books"""


class PersistenceError(ReadingLogError):
    """The storage backend refused or failed to write"""


class InvalidStateError(ReadingLogError, RuntimeError):
    """An import pipeline operation was called in the wrong state"""
