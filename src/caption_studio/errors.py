"""Domain exceptions."""


class CaptionStudioError(Exception):
    """Base class for all caption studio failures."""


class FrameExtractionError(CaptionStudioError):
    """No still frame could be produced for a media file."""


class CaptionGenerationError(CaptionStudioError):
    """The captioning model call failed or returned an unusable result."""
