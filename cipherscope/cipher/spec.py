from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


Architecture = Literal["FEISTEL", "LAI_MASSEY", "ARX"]
Kind = Literal["block", "stream"]


class CipherSpec(BaseModel):
    """Static description of one engine.

    Used by the registry, the UI and the evaluation tools to size inputs
    and label results. It carries no key material.
    """

    name: str = Field(..., min_length=3, max_length=40)
    architecture: Architecture
    kind: Kind = Field(default="block")
    block_size_bits: int = Field(..., description="Block width; keystream block width for stream engines", ge=32, le=512)
    key_size_bits: int = Field(..., ge=56, le=256)
    rounds: float = Field(..., gt=0, le=64, description="IDEA runs 8.5 rounds")
    reference: str = Field(default="")

    model_config = {"frozen": True}

    @field_validator("architecture", mode="before")
    @classmethod
    def _upper_arch(cls, v: str) -> str:
        return v.upper()

    @field_validator("block_size_bits")
    @classmethod
    def _block_size(cls, v: int) -> int:
        if v % 8 != 0:
            raise ValueError("block_size_bits must be a multiple of 8")
        return v

    @field_validator("key_size_bits")
    @classmethod
    def _key_size(cls, v: int) -> int:
        if v % 8 != 0:
            raise ValueError("key_size_bits must be a multiple of 8")
        return v

    @property
    def block_size_bytes(self) -> int:
        return self.block_size_bits // 8

    @property
    def key_size_bytes(self) -> int:
        return self.key_size_bits // 8
