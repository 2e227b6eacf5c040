"""
Tests for the permission parser — octal strings to file modes.
"""

import itertools

import pytest

from jbupdater.core.errors import DigitOutOfRange, InvalidLength, InvalidPermissionSpec
from jbupdater.core.services.permissions import parse_permission


class TestParsePermission:
    @pytest.mark.parametrize(
        "spec, mode",
        [
            ("0755", 0o755),
            ("0644", 0o644),
            ("0000", 0o000),
            ("0777", 0o777),
            ("4755", 0o4755),
            ("1777", 0o1777),
            ("7777", 0o7777),
        ],
    )
    def test_known_modes(self, spec, mode):
        assert parse_permission(spec) == mode

    def test_every_valid_string_matches_its_digits(self):
        for digits in itertools.product("01234567", repeat=4):
            spec = "".join(digits)
            mode = parse_permission(spec)
            assert mode == int(spec, 8)
            assert mode & 0o7 == int(spec[3])
            assert (mode >> 3) & 0o7 == int(spec[2])
            assert (mode >> 6) & 0o7 == int(spec[1])
            assert (mode >> 9) & 0o7 == int(spec[0])


class TestInvalidLength:
    @pytest.mark.parametrize("spec", ["", "7", "755", "00755", "075500"])
    def test_wrong_length_fails(self, spec):
        with pytest.raises(InvalidLength):
            parse_permission(spec)

    def test_carries_best_effort_mode(self):
        with pytest.raises(InvalidLength) as exc:
            parse_permission("755")
        assert exc.value.best_effort_mode == 0o755
        assert exc.value.spec == "755"

    def test_length_checked_before_digits(self):
        with pytest.raises(InvalidLength):
            parse_permission("99")


class TestDigitOutOfRange:
    @pytest.mark.parametrize("spec", ["0789", "0758", "07a5", "-755", "0 55"])
    def test_non_octal_fails(self, spec):
        with pytest.raises(DigitOutOfRange):
            parse_permission(spec)

    def test_best_effort_mode_is_still_returned(self):
        with pytest.raises(DigitOutOfRange) as exc:
            parse_permission("0789")
        # 8 and 9 keep their low three bits: 0, 1
        assert exc.value.best_effort_mode == 0o701

    def test_errors_share_a_base(self):
        with pytest.raises(InvalidPermissionSpec):
            parse_permission("0999")
        with pytest.raises(ValueError):
            parse_permission("12")

    def test_message_names_the_input(self):
        with pytest.raises(InvalidPermissionSpec, match="0789"):
            parse_permission("0789")
