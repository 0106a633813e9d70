"""Configuration model and loaders for pdfaudify.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.
- Apply explicit overrides (usually CLI flags) on top of either source.

Key types:
- `PdfAudifyConfig`: normalized runtime settings for a pipeline run.
- `ConfigLoader`: static construction helpers for `PdfAudifyConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .audio.merger import SINGLE_MEMBER_POLICIES
from .io.gcs_storage import GCS_COMPOSE_LIMIT
from .models.datatypes import PipelinePaths
from .parsing import normalize_optional_string
from .tts.voices import VoiceSettings

_ENV_PREFIX = "PDFAUDIFY_"


@dataclass(slots=True)
class PdfAudifyConfig:
    """Runtime configuration for one pipeline run.

    Attributes:
        source_path: Storage path of the source PDF, relative to the bucket or local root.
        bucket: GCS bucket name; mutually exclusive with `local_root`.
        local_root: Local directory standing in for object storage.
        path_prefix: Root prefix for derived `json`, `mp3`, and `out` paths.
        language_code: Synthesis language code.
        delimiter: Sentence terminator inserted and split on by segmentation.
        voice_gender: SSML voice gender name.
        audio_encoding: Synthesis audio encoding; only `MP3` concatenates safely.
        max_length: Upper bound on characters per synthesis request.
        concurrency: Maximum in-flight jobs per stage batch.
        max_attempts: Total attempts per job, including the first.
        max_combine: Maximum segments merged by one combine call.
        single_member_merge: How a one-segment merge group is materialized.
        ocr_batch_size: Pages per OCR output shard.
        ocr_timeout_seconds: Wait bound for the OCR long-running operation.
        list_limit: Maximum object names returned by one listing.
    """

    source_path: str
    bucket: str | None = None
    local_root: Path | None = None
    path_prefix: str = "dev"
    language_code: str = "ja-JP"
    delimiter: str = "。"
    voice_gender: str = "NEUTRAL"
    audio_encoding: str = "MP3"
    max_length: int = 5000
    concurrency: int = 8
    max_attempts: int = 5
    max_combine: int = 32
    single_member_merge: str = "combine"
    ocr_batch_size: int = 2
    ocr_timeout_seconds: float = 600.0
    list_limit: int = 1000

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        if not self.source_path.lower().endswith(".pdf"):
            raise ValueError(f"`source_path` must name a `.pdf` object, got `{self.source_path}`.")
        if (self.bucket is None) == (self.local_root is None):
            raise ValueError("Exactly one of `bucket` or `local_root` must be set.")
        if not self.delimiter:
            raise ValueError("`delimiter` must be a non-empty string.")
        for name in (
            "max_length",
            "concurrency",
            "max_attempts",
            "ocr_batch_size",
            "list_limit",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"`{name}` must be a positive integer.")
        if self.ocr_timeout_seconds <= 0:
            raise ValueError("`ocr_timeout_seconds` must be a positive number.")
        if self.max_combine < 2:
            raise ValueError("`max_combine` must be at least 2.")
        if self.bucket is not None and self.max_combine > GCS_COMPOSE_LIMIT:
            raise ValueError(
                f"`max_combine` must not exceed {GCS_COMPOSE_LIMIT} for GCS buckets."
            )
        if self.single_member_merge not in SINGLE_MEMBER_POLICIES:
            policies = ", ".join(SINGLE_MEMBER_POLICIES)
            raise ValueError(f"`single_member_merge` must be one of: {policies}.")
        self.voice_settings().validate()

    def voice_settings(self) -> VoiceSettings:
        """Return the voice selection sent with every synthesis request."""

        return VoiceSettings(
            language_code=self.language_code,
            voice_gender=self.voice_gender,
            audio_encoding=self.audio_encoding,
        )

    def paths(self) -> PipelinePaths:
        """Return derived storage locations for the configured source."""

        return PipelinePaths.from_source(self.source_path, self.path_prefix)


class ConfigLoader:
    """Factory methods for creating `PdfAudifyConfig` from external sources."""

    _STRING_KEYS = frozenset(
        {
            "source_path",
            "bucket",
            "path_prefix",
            "language_code",
            "voice_gender",
            "audio_encoding",
            "single_member_merge",
        }
    )
    _POSITIVE_INT_KEYS = frozenset(
        {
            "max_length",
            "concurrency",
            "max_attempts",
            "max_combine",
            "ocr_batch_size",
            "list_limit",
        }
    )
    _SUPPORTED_KEYS = _STRING_KEYS | _POSITIVE_INT_KEYS | {
        "local_root",
        "delimiter",
        "ocr_timeout_seconds",
    }

    @staticmethod
    def from_yaml(
        path: Path, overrides: Mapping[str, Any] | None = None
    ) -> PdfAudifyConfig:
        """Create a validated config from a YAML file and optional overrides."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        ConfigLoader._validate_keys(payload, f"YAML `{path}`")
        return ConfigLoader._build_config_from_mapping(
            ConfigLoader._merge(payload, overrides), source_label=f"YAML `{path}`"
        )

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> PdfAudifyConfig:
        """Create a validated config from `PDFAUDIFY_*` variables and optional overrides."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key: env_map[f"{_ENV_PREFIX}{key.upper()}"]
            for key in ConfigLoader._SUPPORTED_KEYS
            if f"{_ENV_PREFIX}{key.upper()}" in env_map
        }
        return ConfigLoader._build_config_from_mapping(
            ConfigLoader._merge(payload, overrides), source_label="Environment"
        )

    @staticmethod
    def _merge(
        payload: Mapping[str, Any], overrides: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        """Layer non-`None` overrides on top of a source payload."""

        merged = dict(payload)
        if overrides:
            ConfigLoader._validate_keys(overrides, "Overrides")
            merged.update({key: value for key, value in overrides.items() if value is not None})
        return merged

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Reject keys that do not correspond to a configuration field."""

        unknown = sorted(str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> PdfAudifyConfig:
        """Build a validated config from a normalized mapping payload."""

        source_path = ConfigLoader._optional_non_empty_string(payload, "source_path")
        if source_path is None:
            raise ValueError(f"{source_label} requires non-empty `source_path`.")

        values: dict[str, Any] = {"source_path": source_path}
        for key in ConfigLoader._STRING_KEYS - {"source_path"}:
            value = ConfigLoader._optional_non_empty_string(payload, key)
            if value is not None:
                values[key] = value
        for key in ConfigLoader._POSITIVE_INT_KEYS:
            value = ConfigLoader._optional_positive_int(payload, key, source_label)
            if value is not None:
                values[key] = value

        local_root = ConfigLoader._optional_non_empty_string(payload, "local_root")
        if local_root is not None:
            values["local_root"] = Path(local_root)
        delimiter = payload.get("delimiter")
        if delimiter is not None and str(delimiter):
            values["delimiter"] = str(delimiter)
        timeout = ConfigLoader._optional_positive_float(
            payload, "ocr_timeout_seconds", source_label
        )
        if timeout is not None:
            values["ocr_timeout_seconds"] = timeout

        config = PdfAudifyConfig(**values)
        config.validate()
        return config

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_positive_int(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> int | None:
        """Read and validate a positive integer payload field."""

        if key not in payload:
            return None

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        if isinstance(raw_value, int):
            parsed = raw_value
        else:
            normalized = normalize_optional_string(raw_value)
            if normalized is None:
                return None
            try:
                parsed = int(normalized)
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive integer."
                ) from exc

        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_positive_float(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> float | None:
        """Read and validate a positive number payload field."""

        if key not in payload:
            return None

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return None
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.") from exc
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        return parsed
