"""Speech provider interface and Google Cloud Text-to-Speech implementation.

Responsibilities:
- Define the protocol for chunk-level speech synthesis.
- Provide a Cloud Text-to-Speech backed synthesizer returning MP3 bytes.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from google.api_core import exceptions as google_exceptions
from google.cloud import texttospeech

from ..errors import TransientProviderError
from .voices import VoiceSettings


class SpeechProvider(Protocol):
    """Protocol for TTS provider implementations."""

    async def synthesize(self, text: str, voice: VoiceSettings) -> bytes:
        """Synthesize one text chunk into encoded audio bytes."""


class GoogleSpeechProvider:
    """Cloud Text-to-Speech synthesizer."""

    def __init__(self, client: texttospeech.TextToSpeechClient | None = None) -> None:
        """Initialize the synthesizer; the client is created on first use."""

        self._client = client

    def _speech_client(self) -> texttospeech.TextToSpeechClient:
        """Return the client, creating it with ambient credentials if needed."""

        if self._client is None:
            self._client = texttospeech.TextToSpeechClient()
        return self._client

    async def synthesize(self, text: str, voice: VoiceSettings) -> bytes:
        """Return encoded audio for `text` without blocking the event loop."""

        synthesis_input = texttospeech.SynthesisInput(text=text)
        voice_params = texttospeech.VoiceSelectionParams(
            language_code=voice.language_code,
            ssml_gender=texttospeech.SsmlVoiceGender[voice.voice_gender],
        )
        audio_config = texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding[voice.audio_encoding],
        )
        try:
            response = await asyncio.to_thread(
                self._speech_client().synthesize_speech,
                input=synthesis_input,
                voice=voice_params,
                audio_config=audio_config,
            )
        except google_exceptions.GoogleAPIError as exc:
            raise TransientProviderError(
                f"Cloud Text-to-Speech request failed: {exc}",
                provider="texttospeech",
                operation="synthesize",
            ) from exc
        if not response.audio_content:
            raise TransientProviderError(
                "Cloud Text-to-Speech response is empty.",
                provider="texttospeech",
                operation="synthesize",
            )
        return bytes(response.audio_content)
