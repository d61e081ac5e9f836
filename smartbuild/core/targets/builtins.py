from __future__ import annotations

from .models import TargetDevice, WordSizes


DEFAULT_TARGET = "ARM Compatible->ARM Cortex-M4"


def builtin_targets() -> list[TargetDevice]:
    # Deterministic catalog. Projects can add or override devices via templates/targets/.
    return [
        TargetDevice(
            name="ARM Compatible->ARM Cortex-M4",
            vendor="ARM Compatible",
            word_sizes=WordSizes(),
            supports_long_long=True,
            description="32-bit Cortex-M4 microcontroller",
        ),
        TargetDevice(
            name="ARM Compatible->ARM Cortex-M0",
            vendor="ARM Compatible",
            word_sizes=WordSizes(),
            supports_long_long=True,
            description="32-bit Cortex-M0/M0+ microcontroller",
        ),
        TargetDevice(
            name="Atmel->AVR",
            vendor="Atmel",
            word_sizes=WordSizes(int_bits=16, native_bits=8, pointer_bits=16),
            supports_long_long=False,
            description="8-bit AVR (ATmega328P / Arduino Uno class boards)",
        ),
        TargetDevice(
            name="Texas Instruments->C2000",
            vendor="Texas Instruments",
            word_sizes=WordSizes(char_bits=16, int_bits=16, native_bits=16),
            supports_long_long=False,
            description="16-bit C2000 DSP",
        ),
        TargetDevice(
            name="Intel->x86-64 (Linux 64)",
            vendor="Intel",
            word_sizes=WordSizes(long_bits=64, native_bits=64, pointer_bits=64),
            supports_long_long=True,
            description="Host build for simulation and software-in-the-loop",
        ),
    ]
