"""Tests for OUI vendor lookup and MAC helpers."""

import pytest

from homescan.errors import InvalidMacError
from homescan.oui import (
    VENDOR_TABLE,
    is_private_mac,
    load_vendor_table,
    normalize_mac,
    oui_prefix,
    resolve_vendor,
)


class TestNormalizeMac:
    """Tests for MAC normalization."""

    def test_canonical_mac_unchanged(self):
        """Canonical MACs should pass through."""
        assert normalize_mac("ac:de:48:00:11:22") == "ac:de:48:00:11:22"

    def test_uppercase_is_lowered(self):
        """Should lowercase hex digits."""
        assert normalize_mac("AC:DE:48:00:11:22") == "ac:de:48:00:11:22"

    def test_dash_separators(self):
        """Should accept dash separators."""
        assert normalize_mac("ac-de-48-00-11-22") == "ac:de:48:00:11:22"

    def test_unpadded_octets(self):
        """Should zero-pad single digit octets (BSD arp output)."""
        assert normalize_mac("0:50:56:c0:0:8") == "00:50:56:c0:00:08"

    @pytest.mark.parametrize("mac", [
        "",
        "ac:de:48",
        "ac:de:48:00:11:22:33",
        "acde48001122",
        "ac:de-48:00:11:22",
        "gg:de:48:00:11:22",
        "(incomplete)",
        "ac:de:48:00:11:222",
    ])
    def test_malformed_mac_raises(self, mac):
        """Malformed MACs should raise InvalidMacError."""
        with pytest.raises(InvalidMacError):
            normalize_mac(mac)

    def test_invalid_mac_error_is_value_error(self):
        """InvalidMacError should be catchable as ValueError."""
        with pytest.raises(ValueError):
            normalize_mac("not-a-mac")

    def test_oui_prefix(self):
        """Should return the first three octets."""
        assert oui_prefix("0:50:56:c0:0:8") == "00:50:56"


class TestResolveVendor:
    """Tests for vendor resolution."""

    def test_known_prefix(self):
        """Should resolve a prefix present in the table."""
        assert resolve_vendor("ac:de:48:12:34:56") == "Apple"
        assert resolve_vendor("e4:24:6c:12:34:56") == "Xiaomi"

    def test_case_insensitive(self):
        """Lookup should not depend on case."""
        assert resolve_vendor("AC:DE:48:12:34:56") == "Apple"
        assert resolve_vendor("E4:24:6C:AA:BB:CC") == "Xiaomi"

    def test_unknown_prefix(self):
        """Should return None for a prefix absent from the table."""
        assert resolve_vendor("12:34:56:78:90:ab") is None

    def test_custom_table(self):
        """Should use an explicitly passed table."""
        table = {"12:34:56": "Acme"}
        assert resolve_vendor("12:34:56:78:90:ab", table=table) == "Acme"
        assert resolve_vendor("ac:de:48:12:34:56", table=table) is None

    def test_malformed_mac_raises(self):
        """Malformed MACs should raise instead of guessing."""
        with pytest.raises(InvalidMacError):
            resolve_vendor("ac:de")


class TestIsPrivateMac:
    """Tests for locally administered MAC detection."""

    @pytest.mark.parametrize("nibble", list("0123456789abcdef"))
    def test_every_second_nibble(self, nibble):
        """Only 2, 6, a and e should mark a MAC as private."""
        mac = f"0{nibble}:11:22:33:44:55"
        assert is_private_mac(mac) is (nibble in "26ae")

    @pytest.mark.parametrize("nibble", list("0123456789ABCDEF"))
    def test_every_second_nibble_uppercase(self, nibble):
        """Detection should be case-insensitive."""
        mac = f"F{nibble}:11:22:33:44:55"
        assert is_private_mac(mac) is (nibble in "26AE")

    def test_unpadded_first_octet(self):
        """'2:...' is octet 02, which is locally administered."""
        assert is_private_mac("2:0:0:0:0:1") is True

    def test_malformed_mac_raises(self):
        """Malformed MACs should raise."""
        with pytest.raises(InvalidMacError):
            is_private_mac("x")


class TestVendorTable:
    """Tests for the bundled vendor table."""

    def test_table_is_read_only(self):
        """The table should not be mutable."""
        with pytest.raises(TypeError):
            VENDOR_TABLE["12:34:56"] = "Acme"

    def test_prefixes_are_canonical(self):
        """Every key should be a lowercase 8-character prefix."""
        for prefix in VENDOR_TABLE:
            assert len(prefix) == 8
            assert prefix == prefix.lower()
            assert prefix.count(":") == 2

    def test_load_custom_table(self, tmp_path):
        """Should load and invert a vendor -> prefixes file."""
        path = tmp_path / "oui.yaml"
        path.write_text('Acme:\n  - "12:34:56"\n  - "AB:CD:EF"\n')

        table = load_vendor_table(path)

        assert table == {"12:34:56": "Acme", "ab:cd:ef": "Acme"}

    def test_load_rejects_bad_prefix(self, tmp_path):
        """Should reject prefixes that are not 3 octets."""
        path = tmp_path / "oui.yaml"
        path.write_text('Acme:\n  - "12:34"\n')

        with pytest.raises(ValueError):
            load_vendor_table(path)
