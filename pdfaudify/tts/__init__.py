"""Text-to-speech components.

This package contains voice settings, speech provider interfaces, and the
chunk-level speech synthesis stage.
"""

from .stage import SpeechSynthesisStage
from .synthesizer import GoogleSpeechProvider, SpeechProvider
from .voices import VoiceSettings

__all__ = ["GoogleSpeechProvider", "SpeechProvider", "SpeechSynthesisStage", "VoiceSettings"]
