"""Voice settings for synthesis requests.

Responsibilities:
- Represent the language, gender, and encoding sent with every synthesis call.
- Decouple pipeline logic from provider-specific enum types.
"""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_VOICE_GENDERS = frozenset(
    {"NEUTRAL", "MALE", "FEMALE", "SSML_VOICE_GENDER_UNSPECIFIED"}
)
SUPPORTED_AUDIO_ENCODINGS = frozenset({"MP3"})


@dataclass(frozen=True, slots=True)
class VoiceSettings:
    """Declarative voice selection used by speech providers.

    Attributes:
        language_code: BCP-47 language code, e.g. `ja-JP`.
        voice_gender: SSML voice gender name.
        audio_encoding: Output encoding name; segments are concatenated as MP3.
    """

    language_code: str = "ja-JP"
    voice_gender: str = "NEUTRAL"
    audio_encoding: str = "MP3"

    def validate(self) -> None:
        """Reject settings the speech stage cannot produce."""

        if not self.language_code.strip():
            raise ValueError("`language_code` must be a non-empty string.")
        if self.voice_gender not in SUPPORTED_VOICE_GENDERS:
            supported = ", ".join(sorted(SUPPORTED_VOICE_GENDERS))
            raise ValueError(f"`voice_gender` must be one of: {supported}.")
        if self.audio_encoding not in SUPPORTED_AUDIO_ENCODINGS:
            raise ValueError("`audio_encoding` must be `MP3`.")
