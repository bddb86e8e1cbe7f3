"""Exception hierarchy for the character creator."""

from __future__ import annotations


class CharacterCreatorError(Exception):
    """Base class for all failures raised by the core package."""


class ReadError(CharacterCreatorError):
    """The uploaded image bytes could not be read."""


class RecognitionError(CharacterCreatorError):
    """The remote classification call failed."""


class TransformationError(CharacterCreatorError):
    """The remote image generation call failed."""
