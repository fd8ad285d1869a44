import math
import struct

import pytest

from sharkmon.domain.exceptions import ConfigError
from sharkmon.domain.registers import Endpoint, decode_f32, encode_f32, parse_endpoint, to_f32


class TestDecodeF32:
    """Test suite for decoding float32 values from register pairs."""

    @pytest.mark.parametrize(
        "words, expected",
        [
            ([0x447A, 0x0000], 1000.0),
            ([0x3F80, 0x0000], 1.0),
            ([0xC2C8, 0x0000], -100.0),
            ([0x4370, 0x0000], 240.0),
            ([0x4270, 0x0000], 60.0),
            ([0x0000, 0x0000], 0.0),
        ],
    )
    def test_known_bit_patterns(self, words, expected):
        """Test decoding of well-known IEEE-754 patterns."""
        assert decode_f32(words) == expected

    def test_low_word_carries_mantissa(self):
        """Test that the second word is used as the low 16 bits."""
        # 0x40490FDB is float32 pi
        assert decode_f32([0x4049, 0x0FDB]) == struct.unpack(">f", bytes.fromhex("40490FDB"))[0]
        assert decode_f32([0x4049, 0x0FDB]) == pytest.approx(math.pi, rel=1e-7)

    def test_matches_bit_reinterpretation(self):
        """Test that decoding is a pure bit reinterpretation of (hi << 16) | lo."""
        for hi, lo in [(0x1234, 0x5678), (0x7F7F, 0xFFFF), (0x8000, 0x0001), (0x4B3C, 0x614E)]:
            raw = (hi << 16) | lo
            expected = struct.unpack(">f", raw.to_bytes(4, "big"))[0]
            assert decode_f32([hi, lo]) == expected

    def test_nan_pattern(self):
        """Test that NaN patterns decode to NaN instead of failing."""
        assert math.isnan(decode_f32([0x7FC0, 0x0000]))

    def test_infinity_pattern(self):
        """Test that the infinity pattern decodes to +inf."""
        assert decode_f32([0x7F80, 0x0000]) == math.inf

    @pytest.mark.parametrize("words", [[], [0x447A], [0x447A, 0x0000, 0x0000]])
    def test_wrong_length_raises(self, words):
        """Test that anything but exactly two registers is rejected."""
        with pytest.raises(ValueError):
            decode_f32(words)

    def test_encode_is_inverse(self):
        """Test that encode_f32 produces the words decode_f32 expects."""
        assert encode_f32(1000.0) == [0x447A, 0x0000]
        assert decode_f32(encode_f32(230.5)) == 230.5

    def test_to_f32_rounds_to_single_precision(self):
        """Test that to_f32 drops double precision bits."""
        assert to_f32(0.1) != 0.1
        assert to_f32(0.1) == struct.unpack(">f", struct.pack(">f", 0.1))[0]
        assert to_f32(120.0) == 120.0


class TestParseEndpoint:
    """Test suite for meter endpoint parsing."""

    def test_ipv4(self):
        """Test parsing of an IPv4 address with port."""
        assert parse_endpoint("192.168.1.100:502") == Endpoint(host="192.168.1.100", port=502)

    def test_hostname(self):
        """Test parsing of a hostname with port."""
        assert parse_endpoint("meter.local:5020") == Endpoint(host="meter.local", port=5020)

    def test_bracketed_ipv6(self):
        """Test parsing of a bracketed IPv6 address."""
        endpoint = parse_endpoint("[fe80::1]:502")
        assert endpoint == Endpoint(host="fe80::1", port=502)
        assert str(endpoint) == "[fe80::1]:502"

    def test_surrounding_whitespace_is_ignored(self):
        """Test that leading/trailing whitespace does not matter."""
        assert parse_endpoint("  10.0.0.1:502\n") == Endpoint(host="10.0.0.1", port=502)

    def test_str_roundtrip(self):
        """Test that str() renders host:port."""
        assert str(Endpoint(host="10.0.0.1", port=502)) == "10.0.0.1:502"

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "   ",
            "192.168.1.100",
            "192.168.1.100:",
            ":502",
            "192.168.1.100:abc",
            "192.168.1.100:0",
            "192.168.1.100:65536",
            "192.168.1.100:-1",
            "fe80::1:502",
            "[fe80::1]",
            "[fe80::1]502",
            "my host:502",
        ],
    )
    def test_invalid_endpoints_raise_config_error(self, value):
        """Test that malformed endpoints raise ConfigError."""
        with pytest.raises(ConfigError):
            parse_endpoint(value)

    def test_none_raises_config_error(self):
        """Test that a missing endpoint raises ConfigError."""
        with pytest.raises(ConfigError):
            parse_endpoint(None)
