"""Pydantic models describing optimize configuration and bundle metadata."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ASSET_LOADERS: Dict[str, str] = {
    ".ttf": "file",
    ".svg": "file",
    ".png": "file",
    ".sh": "file",
}


class EntryPoint(BaseModel):
    name: str = Field(..., description="Module id bundled as its own entry, without extension.")
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class Language(BaseModel):
    id: str
    translation_id: Optional[str] = None
    folder_name: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class ManualConcatJob(BaseModel):
    src: List[str] = Field(..., description="Files concatenated in the order given.")
    out: str = Field(..., description="Destination path relative to the output tree.")

    model_config = ConfigDict(extra="forbid")


class EsmTaskOptions(BaseModel):
    src: str = Field(..., description="Folder (relative to the workspace root) to read modules from.")
    entry_points: List[EntryPoint] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list, description="Passthrough globs; '!' negates.")
    external_loader_info: Optional[Dict[str, Any]] = None
    bundle_loader: bool = True
    include_loader: bool = True
    header: Optional[str] = None
    bundle_info: bool = False
    languages: List[Language] = Field(default_factory=list)
    serial: bool = Field(default=False, description="Bundle one module at a time for debugging.")
    inject_header: bool = True
    source_maps: bool = True
    asset_loaders: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ASSET_LOADERS))
    target: List[str] = Field(default_factory=lambda: ["es2023"])

    model_config = ConfigDict(extra="forbid")

    @field_validator("asset_loaders")
    @classmethod
    def _normalize_extensions(cls, value: Dict[str, str]) -> Dict[str, str]:
        return {(key if key.startswith(".") else f".{key}"): mode for key, mode in value.items()}


class CommonJSTaskOptions(BaseModel):
    src: str
    entry_points: List[str] = Field(default_factory=list)
    platform: Literal["browser", "node", "neutral"] = "node"
    external: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class OptimizeTaskOptions(BaseModel):
    out: str = Field(..., description="Destination folder for the optimized files.")
    root: Optional[str] = Field(default=None, description="Workspace root; defaults to the config folder.")
    esm: EsmTaskOptions
    commonjs: Optional[CommonJSTaskOptions] = None
    manual: List[ManualConcatJob] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class MinifyOptions(BaseModel):
    src: str
    source_map_base_url: Optional[str] = None
    max_concurrency: int = Field(default_factory=lambda: max(os.cpu_count() or 1, 1), ge=1)

    model_config = ConfigDict(extra="forbid")


class BundleInfo(BaseModel):
    graph: Dict[str, List[str]] = Field(default_factory=dict)
    bundles: Dict[str, List[str]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class MetafileImport(BaseModel):
    path: str
    kind: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class MetafileInput(BaseModel):
    size: int = Field(default=0, alias="bytes")
    imports: List[MetafileImport] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class MetafileOutput(BaseModel):
    size: int = Field(default=0, alias="bytes")
    inputs: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    entry_point: Optional[str] = Field(default=None, alias="entryPoint")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Metafile(BaseModel):
    inputs: Dict[str, MetafileInput] = Field(default_factory=dict)
    outputs: Dict[str, MetafileOutput] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")
