"""Settings read once from the process environment."""

from __future__ import annotations

import json
import os
import pathlib
from dataclasses import dataclass
from typing import Any, Mapping

from vitrine.errors import ConfigError

DEFAULT_PLACEHOLDER_THUMB = "/thumbs/_placeholder.webp"
DEFAULT_PUBLIC_DIR = "public"
DEFAULT_BUILD_DIR = "build"
DEFAULT_BATCH_SIZE = 10
PREVIEW_MODES = {"batched", "sequential"}
VIDEO_SOURCES = {"mirror-log", "bucket"}


def _get(env: Mapping[str, str], name: str, default: str = "") -> str:
    return (env.get(name) or default).strip()


def _require(env: Mapping[str, str], *names: str) -> list[str]:
    values = [_get(env, name) for name in names]
    missing = [name for name, value in zip(names, values) if not value]
    if missing:
        raise ConfigError(f"Missing {', '.join(missing)}")
    return values


@dataclass(frozen=True, slots=True)
class BuildSettings:
    brands_csv_url: str
    master_csv_url: str
    placeholder_thumb: str = DEFAULT_PLACEHOLDER_THUMB
    public_dir: pathlib.Path = pathlib.Path(DEFAULT_PUBLIC_DIR)
    build_dir: pathlib.Path = pathlib.Path(DEFAULT_BUILD_DIR)
    step_summary: pathlib.Path | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "BuildSettings":
        env = os.environ if env is None else env
        brands_url, master_url = _require(env, "BRANDS_CSV_URL", "MASTER_CSV_URL")
        summary = _get(env, "GITHUB_STEP_SUMMARY")
        return cls(
            brands_csv_url=brands_url,
            master_csv_url=master_url,
            placeholder_thumb=_get(env, "PLACEHOLDER_THUMB", DEFAULT_PLACEHOLDER_THUMB),
            public_dir=pathlib.Path(_get(env, "PUBLIC_DIR", DEFAULT_PUBLIC_DIR)),
            build_dir=pathlib.Path(_get(env, "BUILD_DIR", DEFAULT_BUILD_DIR)),
            step_summary=pathlib.Path(summary) if summary else None,
        )


@dataclass(frozen=True, slots=True)
class PreviewSettings:
    service_account: dict[str, Any]
    mode: str = "batched"
    batch_size: int = DEFAULT_BATCH_SIZE
    public_dir: pathlib.Path = pathlib.Path(DEFAULT_PUBLIC_DIR)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "PreviewSettings":
        env = os.environ if env is None else env
        mode = _get(env, "PREVIEW_MODE", "batched").lower()
        if mode not in PREVIEW_MODES:
            raise ConfigError(f"PREVIEW_MODE must be one of {sorted(PREVIEW_MODES)}, got {mode!r}")
        raw_size = _get(env, "PREVIEW_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))
        try:
            batch_size = int(raw_size)
        except ValueError as exc:
            raise ConfigError(f"PREVIEW_BATCH_SIZE is not an integer: {raw_size!r}") from exc
        if batch_size < 1:
            raise ConfigError("PREVIEW_BATCH_SIZE must be positive")
        return cls(
            service_account=_service_account(env),
            mode=mode,
            batch_size=batch_size,
            public_dir=pathlib.Path(_get(env, "PUBLIC_DIR", DEFAULT_PUBLIC_DIR)),
        )


def _service_account(env: Mapping[str, str]) -> dict[str, Any]:
    raw = _get(env, "GOOGLE_SERVICE_ACCOUNT_KEY")
    if raw:
        try:
            info = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"GOOGLE_SERVICE_ACCOUNT_KEY is not valid JSON: {exc}") from exc
        if not isinstance(info, dict):
            raise ConfigError("GOOGLE_SERVICE_ACCOUNT_KEY must be a JSON object")
        return info
    email, private_key = _require(env, "GOOGLE_SERVICE_ACCOUNT_EMAIL", "GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY")
    return {
        "type": "service_account",
        "client_email": email,
        "private_key": private_key.replace("\\n", "\n"),
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@dataclass(frozen=True, slots=True)
class VideoSettings:
    public_url: str
    source: str = "mirror-log"
    mirror_log_url: str = ""
    account_id: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    bucket: str = "brand-videos"
    public_dir: pathlib.Path = pathlib.Path(DEFAULT_PUBLIC_DIR)

    @property
    def endpoint_url(self) -> str:
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "VideoSettings":
        env = os.environ if env is None else env
        (public_url,) = _require(env, "R2_PUBLIC_URL")
        source = _get(env, "VIDEO_SOURCE", "mirror-log").lower()
        if source not in VIDEO_SOURCES:
            raise ConfigError(f"VIDEO_SOURCE must be one of {sorted(VIDEO_SOURCES)}, got {source!r}")
        mirror_log_url = ""
        account_id = access_key = secret = ""
        if source == "mirror-log":
            (mirror_log_url,) = _require(env, "MIRROR_LOG_URL")
        else:
            account_id, access_key, secret = _require(
                env, "R2_ACCOUNT_ID", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY"
            )
        return cls(
            public_url=public_url.rstrip("/"),
            source=source,
            mirror_log_url=mirror_log_url,
            account_id=account_id,
            access_key_id=access_key,
            secret_access_key=secret,
            bucket=_get(env, "R2_BUCKET_NAME", "brand-videos"),
            public_dir=pathlib.Path(_get(env, "PUBLIC_DIR", DEFAULT_PUBLIC_DIR)),
        )
