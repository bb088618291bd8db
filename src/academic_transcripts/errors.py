"""Exception hierarchy for transcript operations"""


class TranscriptError(Exception):
    """Base class for all errors raised by this package"""


class StudentValidationError(TranscriptError):
    """Student form input failed validation (name, age, missing fields)"""


class ImportValidationError(TranscriptError):
    """Import document rejected - nothing was written"""


class StorageError(TranscriptError):
    """Reading or writing the student collection failed"""


class ExportError(TranscriptError):
    """Rendering or writing a transcript document failed"""


class SubjectIndexError(TranscriptError, IndexError):
    """Subject index outside the student's subject list"""


class EditInProgressError(TranscriptError):
    """An edit or save was attempted while a save is still running"""
