import re

import pytest

from model_tools.shared.errors import NamingError
from model_tools.shared.naming import is_identity_column, to_pascal_case


class TestToPascalCase:
    @pytest.mark.parametrize(
        "input_str,expected",
        [
            ("users", "Users"),
            ("user_name", "UserName"),
            ("order_line_item", "OrderLineItem"),
            ("a", "A"),
            ("a_b_c", "ABC"),
            ("user_ID", "UserID"),
            ("createdAt", "CreatedAt"),
            ("v2_items", "V2Items"),
        ],
    )
    def test_to_pascal_case(self, input_str, expected):
        assert to_pascal_case(input_str) == expected

    @pytest.mark.parametrize(
        "input_str,expected",
        [
            ("_hidden", "Hidden"),
            ("trailing_", "Trailing"),
            ("double__underscore", "DoubleUnderscore"),
            ("__both__", "Both"),
        ],
    )
    def test_empty_segments_are_skipped(self, input_str, expected):
        assert to_pascal_case(input_str) == expected

    @pytest.mark.parametrize("input_str", ["", "_", "___"])
    def test_no_segments_rejected(self, input_str):
        with pytest.raises(NamingError) as exc_info:
            to_pascal_case(input_str)
        assert exc_info.value.identifier == input_str

    @pytest.mark.parametrize(
        "input_str",
        ["users", "user_name", "order_line_item", "a_b_c_d_e", "created_at"],
    )
    def test_segment_boundaries_preserved(self, input_str):
        result = to_pascal_case(input_str)
        segments = re.findall(r"[A-Z][^A-Z]*", result)
        assert len(segments) == len(input_str.split("_"))
        assert [s.lower() for s in segments] == input_str.split("_")

    def test_to_pascal_case_caching(self):
        result1 = to_pascal_case("user_name")
        result2 = to_pascal_case("user_name")
        assert result1 == result2 == "UserName"


class TestIsIdentityColumn:
    @pytest.mark.parametrize("name", ["id", "ID", "Id", "iD"])
    def test_identity_names(self, name):
        assert is_identity_column(name)

    @pytest.mark.parametrize("name", ["user_id", "ids", "idx", "", " id"])
    def test_other_names(self, name):
        assert not is_identity_column(name)
