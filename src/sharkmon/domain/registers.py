import struct
from dataclasses import dataclass
from typing import List, Sequence

from sharkmon.domain.exceptions import ConfigError

# Shark 100S register map (holding registers, float32 as [high word][low word])
REG_WATTS = 0x0383
REG_VOLTS = 0x03ED
REG_FREQUENCY = 0x0401

FLOAT32_WORDS = 2
UNIT_ID = 1


def decode_f32(words: Sequence[int]) -> float:
    """
    Reinterpret two big-endian 16-bit words as an IEEE-754 single precision float.
    words[0] holds the high 16 bits, words[1] the low 16 bits.
    """
    if len(words) != FLOAT32_WORDS:
        raise ValueError(f"decode_f32 expects {FLOAT32_WORDS} registers, got {len(words)}")
    raw = ((int(words[0]) & 0xFFFF) << 16) | (int(words[1]) & 0xFFFF)
    return struct.unpack(">f", raw.to_bytes(4, "big"))[0]


def encode_f32(value: float) -> List[int]:
    hi, lo = struct.unpack(">2H", struct.pack(">f", float(value)))
    return [hi, lo]


def to_f32(value: float) -> float:
    """Round a Python float to the nearest float32."""
    return struct.unpack(">f", struct.pack(">f", float(value)))[0]


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_endpoint(value: str) -> Endpoint:
    """
    Parse a meter address like "192.168.1.100:502", "meter.local:502" or "[fe80::1]:502".
    Raises ConfigError if the value cannot be used as an endpoint.
    """
    text = (value or "").strip()
    if not text:
        raise ConfigError("Meter endpoint is empty, expected host:port")

    if text.startswith("["):
        host, sep, port_text = text[1:].partition("]:")
        if not sep:
            raise ConfigError(f"Invalid meter endpoint '{value}', expected [ipv6]:port")
    else:
        host, sep, port_text = text.rpartition(":")
        if not sep:
            raise ConfigError(f"Invalid meter endpoint '{value}', expected host:port")
        if ":" in host:
            raise ConfigError(f"Invalid meter endpoint '{value}', IPv6 addresses must be bracketed")

    if not host or any(c.isspace() for c in host):
        raise ConfigError(f"Invalid host in meter endpoint '{value}'")

    if not port_text.isdigit():
        raise ConfigError(f"Invalid port in meter endpoint '{value}'")
    port = int(port_text)
    if not 1 <= port <= 65535:
        raise ConfigError(f"Port out of range in meter endpoint '{value}'")

    return Endpoint(host=host, port=port)
