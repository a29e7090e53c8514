"""
Configuration loader for the ONNX background-removal service.

Environment variables (prefixed `RMBG_`) are centralized here to keep the
rest of the code focused on the image math and to make operational tuning
clear.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .imaging import RESAMPLE_FILTERS
from .raster import NormalizationParams

NORMALIZATION_PRESETS = {
    # U2-Net / ISNet / most torchvision-trained backbones
    "imagenet": {"mean": (0.485, 0.456, 0.406), "std": (0.229, 0.224, 0.225)},
    # MODNet-style [-1, 1] inputs
    "half": {"mean": (0.5, 0.5, 0.5), "std": (0.5, 0.5, 0.5)},
    # BRIA RMBG-1.4
    "rmbg": {"mean": (0.5, 0.5, 0.5), "std": (1.0, 1.0, 1.0)},
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RMBG_",
        env_file=".env",
        case_sensitive=False,
        protected_namespaces=(),
    )

    # Model + inference
    model_path: Path
    providers: List[str] = Field(default_factory=lambda: ["CPUExecutionProvider"])
    intra_op_num_threads: int = 0  # 0 lets onnxruntime decide
    fallback_input_size: Optional[Tuple[int, int]] = None  # (height, width) for dynamic exports

    # Pre/post-processing
    normalization_preset: str = "imagenet"
    mean: Optional[Tuple[float, float, float]] = None
    std: Optional[Tuple[float, float, float]] = None
    resample_filter: str = "bilinear"
    degenerate_fill: float = 0.5

    # Cloudflare R2 / S3-compatible storage
    r2_endpoint: Optional[str] = None
    r2_access_key_id: Optional[str] = None
    r2_secret_access_key: Optional[str] = None
    r2_bucket_name: Optional[str] = None
    r2_public_base_url: Optional[str] = None
    r2_key_prefix: str = "rmbg"

    # API
    request_timeout_seconds: int = 30
    log_level: str = "INFO"

    @field_validator("normalization_preset")
    @classmethod
    def validate_preset(cls, v: str) -> str:
        if v not in NORMALIZATION_PRESETS:
            raise ValueError(
                f"RMBG_NORMALIZATION_PRESET must be one of {'|'.join(NORMALIZATION_PRESETS)}"
            )
        return v

    @field_validator("resample_filter")
    @classmethod
    def validate_filter(cls, v: str) -> str:
        if v not in RESAMPLE_FILTERS:
            raise ValueError(f"RMBG_RESAMPLE_FILTER must be one of {'|'.join(RESAMPLE_FILTERS)}")
        return v

    @field_validator("degenerate_fill")
    @classmethod
    def validate_fill(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("RMBG_DEGENERATE_FILL must be within [0, 1]")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()


def normalization_params(settings: Optional[Settings] = None) -> NormalizationParams:
    """
    Resolve the mean/std pair for the configured model.

    Explicit `mean`/`std` override the matching half of the preset.
    """
    settings = settings or get_settings()
    preset = NORMALIZATION_PRESETS[settings.normalization_preset]
    return NormalizationParams(
        mean=settings.mean or preset["mean"],
        std=settings.std or preset["std"],
    )
