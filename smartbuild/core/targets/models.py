from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from smartbuild.core.errors import UnsupportedHardwareOption


Endianness = Literal["little", "big"]

NUMERIC_WIDENING = "numeric_widening"


class WordSizes(BaseModel):
    char_bits: int = 8
    short_bits: int = 16
    int_bits: int = 32
    long_bits: int = 32
    long_long_bits: int = 64
    native_bits: int = 32
    pointer_bits: int = 32


class TargetDevice(BaseModel):
    name: str
    vendor: str = "Generic"
    word_sizes: WordSizes = Field(default_factory=WordSizes)
    endianness: Endianness = "little"
    # Native 64-bit integer arithmetic (C `long long`)
    supports_long_long: bool = True
    description: Optional[str] = None

    def check_option(self, option: str, enabled: bool) -> None:
        """Raise UnsupportedHardwareOption when the device cannot honor `option`."""
        if not enabled:
            return
        if option == NUMERIC_WIDENING:
            if not self.supports_long_long:
                raise UnsupportedHardwareOption(
                    self.name, option, "no native 64-bit integer arithmetic"
                )
            if self.word_sizes.long_long_bits < 64:
                raise UnsupportedHardwareOption(
                    self.name, option, f"long long is {self.word_sizes.long_long_bits} bits"
                )
