"""Tests for the recognition and transformation clients."""

from pathlib import Path
import sys
from unittest.mock import Mock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.errors import RecognitionError, TransformationError
from core.models import ImagePayload, InlineImage
from core.recognition import RecognitionClient, is_affirmative
from core.transformation import TransformationClient
from prompts.templates import RECOGNITION_PROMPT, TRANSFORMATION_PROMPT

PAYLOAD = ImagePayload(data="aW1n", media_type="image/jpeg")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("yes", True),
        ("  Yes.\n", True),
        ("YES, it is a cat", True),
        ("no", False),
        ("no, this is a landscape", False),
        ("", False),
        (None, False),
        ("maybe", False),
    ],
)
def test_is_affirmative(text, expected):
    assert is_affirmative(text) is expected


def test_classify_sends_fixed_prompt():
    provider = Mock()
    provider.recognize.return_value = "yes"
    assert RecognitionClient(provider).classify(PAYLOAD) is True
    provider.recognize.assert_called_once_with(PAYLOAD, RECOGNITION_PROMPT)


def test_classify_propagates_failures_as_recognition_error():
    provider = Mock(provider_name="gemini")
    provider.recognize.side_effect = RuntimeError("503 unavailable")
    with pytest.raises(RecognitionError) as excinfo:
        RecognitionClient(provider).classify(PAYLOAD)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_transform_returns_first_inline_image():
    provider = Mock()
    provider.generate.return_value = [
        None,
        InlineImage(data="Zm9v", media_type="image/png"),
        InlineImage(data="YmFy", media_type="image/jpeg"),
    ]
    result = TransformationClient(provider).transform(PAYLOAD)
    assert result == "data:image/png;base64,Zm9v"
    provider.generate.assert_called_once_with(PAYLOAD, TRANSFORMATION_PROMPT)


@pytest.mark.parametrize("parts", [[], [None, None]])
def test_transform_without_image_returns_none(parts):
    provider = Mock()
    provider.generate.return_value = parts
    assert TransformationClient(provider).transform(PAYLOAD) is None


def test_transform_failure_raises_transformation_error():
    provider = Mock(provider_name="gemini")
    provider.generate.side_effect = TimeoutError("read timed out")
    with pytest.raises(TransformationError):
        TransformationClient(provider).transform(PAYLOAD)
